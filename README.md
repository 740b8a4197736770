# reviewdog

Building blocks for code review tooling: a unified diff parser, detection of
build information from CI environments, sources for the diff of a change,
and writers that print review comments.

The package is a library of small, independent modules. It has no
dependencies outside the standard library.

## Modules

### `reviewdog.udiff` — unified diff parsing

Parses the output of `diff -u` or `git diff` into `FileDiff`, `Hunk` and
`Line` objects. A `FileDiff` holds the old and new paths and timestamps,
git's extended header lines (`extended`) and its hunks. Each `Line` records
its `LineType` (`UNCHANGED`, `ADDED` or `DELETED`), its content without the
leading marker, its line numbers in the old and new file (`lnum_old`,
`lnum_new`; 0 where the line does not exist on that side) and its position
within the file's diff (`lnum_diff`).

- `parse_multi_file(source)` parses a diff that covers several files. It
  stops at the first file that cannot be parsed and returns the files parsed
  before it.
- `parse_file(source)` parses the diff of a single file and returns `None`
  when there is nothing to parse. Malformed input raises `NoNewFileError`,
  `NoHunksError` or `InvalidHunkRangeError`.
- `unquote_c_style(text)` decodes the C-style quoted path names that git
  writes for unusual file names; text that does not start with `"` is
  returned unchanged.

`source` may be a `str`, `bytes`, or a text or binary file object.

### `reviewdog.cienv` — build information from CI environments

Reads the environment variables of common CI services (GitHub Actions,
Travis CI, CircleCI, drone.io, GitLab CI, Woodpecker CI, Bitbucket Pipelines)
and returns a `BuildInfo` with owner, repository, commit SHA, branch and pull
request number.

- `get_build_info()` returns a `(BuildInfo, is_pull_request)` pair. It raises
  `CIEnvError` when the owner, repository or commit SHA cannot be found. In
  GitHub Actions the information is read from the event payload file named
  by `GITHUB_EVENT_PATH`.
- `get_gerrit_build_info()` reads `GERRIT_CHANGE_ID`, `GERRIT_REVISION_ID`
  and `GERRIT_BRANCH`, raising `CIEnvError` if one is missing.
- `get_pull_request_num()` returns the pull request number alone, or 0.
- `load_github_event()`, `load_github_event_from_path(event_path)` and
  `build_info_from_github_event_path(event_path)` read a GitHub Actions
  event payload into a `GitHubEvent` or a `BuildInfo`.
- `is_in_github_action()`, `has_read_only_permission_github_token()`,
  `is_in_bitbucket_pipeline()` and `is_in_bitbucket_pipe()` tell where the
  code is running.

Outside a CI service, these variables can be set by hand:

    CI_PULL_REQUEST   pull request number
    CI_COMMIT         commit SHA of the build
    CI_REPO_OWNER     repository owner
    CI_REPO_NAME      repository name

### `reviewdog.diffservice` — where the diff comes from

- `DiffString(diff, strip)` serves a diff held in memory.
- `DiffCmd(command, strip)` runs a command (a sequence of arguments) once
  and caches its output; it is safe to call from several threads. A
  non-zero exit status is accepted as long as the command wrote output, as
  `diff` and `git diff` exit with 1 when differences exist; otherwise
  `subprocess.CalledProcessError` is raised.
- `EmptyDiff()` serves an empty diff.

Each has a `diff()` method returning the diff as bytes, and a `strip`
attribute giving the number of leading path components to remove from file
names (as `patch -p`).

### `reviewdog.comments` — writing results

A `Comment` carries `path`, `line`, `column`, `message`, `original_output`
and `tool_name`.

- `RawCommentWriter(stream)` writes each comment's original tool output
  unchanged, followed by a newline.
- `UnifiedCommentWriter(stream)` writes comments as
  `<file>[:<line>[:<column>]]: [<tool name>] <message>`; the line and column
  are left out when they are 0.
- `MultiCommentService(*services)` posts every comment to each service in
  turn and, on `flush()`, flushes those services that have a `flush` method.

### `reviewdog.settings` — run options

- `Options` holds the settings of one run (diff command, strip counts,
  error formats, format name, tool name, config path, runners, reporter,
  level, filter mode and so on). Its `is_project` property is true when
  neither error formats nor a format name are given.
- `tool_name(options)` returns `options.name`, falling back to `options.f`.
- `build_runners_map(runners)` turns a comma separated list into a set of
  names, dropping blanks.
- `non_empty_env(name)` returns an environment variable's value and raises
  `LookupError` when it is unset or empty.
- `read_conf(path=None)` returns the bytes of the config file at `path`, or
  of the first of `.reviewdog.yaml`, `.reviewdog.yml`, `reviewdog.yaml` and
  `reviewdog.yml` found in the current directory; it raises
  `FileNotFoundError` when none can be read.

`settings.VERSION` is the version string reported for runs.

### `reviewdog.endpoints` — service addresses and the diff command

- `github_base_url()` uses `GITHUB_API`, then `GITHUB_API_URL` (with a
  trailing slash added), then `https://api.github.com/`.
- `gitlab_base_url()` uses `GITLAB_API`, then `CI_API_V4_URL`, then
  `https://gitlab.com/api/v4`.
- `insecure_skip_verify()` is true when `REVIEWDOG_INSECURE_SKIP_VERIFY` is
  exactly `true`.
- `diff_service(command, strip)` splits a shell-style command line such as
  `git diff` and returns a `DiffCmd` for it; an empty command raises
  `ValueError`.

## What the package does not do

- It has no command-line program; the modules are meant to be called from
  your own code.
- It does not parse the output of linters or compilers, and does not itself
  decide which findings fall on changed lines; `reviewdog.udiff` gives the
  line information needed to do so.
- It does not post comments, reviews or checks to GitHub, GitLab, Gitea,
  Gerrit or Bitbucket; the only comment writers print to a stream.
- `read_conf` returns the raw bytes of a config file; nothing parses them.

## Example

```python
from reviewdog.udiff import LineType, parse_multi_file

with open("change.diff") as source:
    for file_diff in parse_multi_file(source):
        for hunk in file_diff.hunks:
            for line in hunk.lines:
                if line.type is LineType.ADDED:
                    print(file_diff.path_new, line.lnum_new, line.content)
```