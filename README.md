# rustlings

A command-line runner for small Rust exercises. Each exercise is a `.rs`
file with a deliberate compile or logic error. You fix it, and the runner
compiles, tests or lints it with the Rust toolchain and reports the result.

## Requirements

- Python 3.11 or later
- A Rust toolchain with `rustc` on your `PATH`. Clippy and build-script
  exercises also need `cargo`.
- `git`, for `rustlings reset`

## Installation

```
pip install .
```

For the test suite:

```
pip install .[test]
pytest
```

## Usage

Run every command from the exercise directory, the one that holds
`info.toml`. Everywhere else the command prints a message and exits with
status 1. It also exits with status 1 when `rustc --version` cannot be run.

```
rustlings                  # welcome text and introduction
rustlings -v               # print the version
rustlings watch            # re-verify exercises whenever a file changes
rustlings verify           # verify every exercise in the listed order
rustlings run <name>       # compile and run, or test, one exercise
rustlings run next         # run the first exercise that is not done yet
rustlings hint <name>      # print the hint for an exercise
rustlings reset <name>     # run "git stash -- <path>" for an exercise
rustlings list             # list exercises with their status
rustlings lsp              # write rust-project.json for rust-analyzer
rustlings cicvverify       # run every exercise and write a JSON report
```

`next` works anywhere an exercise name is expected. Put `--nocapture`
before the subcommand to see the output of test exercises, for example
`rustlings --nocapture run intro1`. An unknown exercise name, a failed
compilation or a failed run gives exit status 1.

### Listing exercises

`rustlings list` prints a table of name, path and status (`Done` or
`Pending`), then a progress line. It takes these options:

- `-p`, `--paths`: show only the paths
- `-n`, `--names`: show only the names
- `-f`, `--filter <patterns>`: comma-separated substrings, lower-cased and
  matched against names or paths
- `-u`, `--unsolved`: show only exercises that are not yet solved
- `-s`, `--solved`: show only solved exercises

### Watch mode

`rustlings watch` verifies the exercises in order and stops at the first
one that fails. When a `.rs` file below `./exercises` is created or saved,
it verifies that exercise first, then every other exercise that is still
pending. While it runs you can type:

- `hint`: print the hint of the exercise that failed last
- `clear`: clear the screen
- `quit`: leave watch mode
- `!<cmd>`: run a command, for example `!rustc --explain E0381`
- `help`: list these commands

`rustlings watch --success-hints` also shows the hint when an exercise
passes but is still marked as pending.

### Marking an exercise done

An exercise that compiles and passes but still holds an `// I AM NOT DONE`
comment counts as pending; the runner shows the lines around that comment.
Delete the line to move on to the next exercise.

### Exercise list

`info.toml` lists the exercises in order. Each entry has a `name`, a `path`,
a `mode` (`compile`, `test`, `clippy` or `buildscript`) and a `hint`:

```toml
[[exercises]]
name = "intro1"
path = "exercises/intro/intro1.rs"
mode = "compile"
hint = "Remove the I AM NOT DONE comment to move on."
```

Clippy exercises write `./exercises/clippy/Cargo.toml` and build-script
exercises write `./exercises/tests/Cargo.toml` before they are checked.

### rust-analyzer

`rustlings lsp` adds a crate for every `.rs` file below `./exercises` and
writes `rust-project.json` in the current directory. The standard library
sources are taken from the `RUST_SRC_PATH` environment variable when it is
set, and otherwise found through `rustc --print sysroot`.

### Batch checking

`rustlings cicvverify` runs every exercise concurrently, prints progress as
each finishes, and writes the results, with counts of successes and
failures and the total time in seconds, to
`.github/result/check_result.json`. The `.github/result` directory must
already exist.

### Plain output

Set the `NO_EMOJI` environment variable for plain-text markers instead of
emoji.

## Using it from Python

`rustlings.exercise.load_exercises("info.toml")` returns `Exercise` objects.
`Exercise.state()` and `Exercise.looks_done()` read the completion marker;
`Exercise.compile()` returns a `CompiledExercise` (a context manager that
removes the built binary on exit) or raises `ExerciseFailed`.
`rustlings.verify.verify` and `rustlings.run.run` raise `VerificationFailed`
when an exercise does not pass. `rustlings.cli.main(argv)` runs the command
line and returns its exit status.

## What it does not include

The package is only the runner. It ships no exercises and no `info.toml`;
those come from the exercise directory you run it in.