"""Verification of exercises: compile, run or test them, then check completion."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum, auto

from rich.console import Console
from rich.status import Status
from rich.text import Text

from .exercise import CompiledExercise, Exercise, ExerciseFailed, Mode
from .ui import no_emoji, success, warn

BAR_WIDTH = 60


class RunMode(Enum):
    """Whether a successful test run asks the learner to move on."""

    INTERACTIVE = auto()
    NON_INTERACTIVE = auto()


class VerificationFailed(Exception):
    """An exercise failed to compile or run, or is still marked as pending."""

    def __init__(self, exercise: Exercise) -> None:
        super().__init__(f"verification of {exercise} failed")
        self.exercise = exercise


def _console() -> Console:
    return Console(highlight=False)


def _progress_line(position: int, total: int, percentage: float) -> Text:
    filled = BAR_WIDTH if total <= 0 else min(BAR_WIDTH * position // total, BAR_WIDTH)
    if filled >= BAR_WIDTH:
        done, rest = "#" * BAR_WIDTH, ""
    else:
        done, rest = "#" * filled + ">", "-" * (BAR_WIDTH - filled - 1)
    return Text.assemble(
        "Progress: [",
        (done, "green"),
        (rest, "red"),
        f"] {position}/{total} ({percentage:.1f} %)",
    )


def verify(
    exercises: Iterable[Exercise],
    progress: tuple[int, int],
    verbose: bool,
    success_hints: bool,
) -> None:
    """Check exercises in order; raise VerificationFailed at the first that fails."""
    num_done, total = progress
    step = 100.0 / total if total else 0.0
    position = num_done
    percentage = num_done * step
    console = _console()
    console.print(_progress_line(position, total, percentage), soft_wrap=True)
    for exercise in exercises:
        if not _check(exercise, verbose, success_hints):
            raise VerificationFailed(exercise)
        position += 1
        percentage += step
        console.print(_progress_line(position, total, percentage), soft_wrap=True)


def _check(exercise: Exercise, verbose: bool, success_hints: bool) -> bool:
    match exercise.mode:
        case Mode.TEST | Mode.BUILD_SCRIPT:
            return compile_and_test(exercise, RunMode.INTERACTIVE, verbose, success_hints)
        case Mode.COMPILE:
            return _compile_and_run_interactively(exercise, success_hints)
        case Mode.CLIPPY:
            return _compile_only(exercise, success_hints)
    raise ValueError(f"unknown mode {exercise.mode!r}")


def test(exercise: Exercise, verbose: bool) -> None:
    """Compile and run an exercise's test harness without prompting."""
    compile_and_test(exercise, RunMode.NON_INTERACTIVE, verbose, False)


def _compile(exercise: Exercise, status: Status) -> CompiledExercise:
    try:
        return exercise.compile()
    except ExerciseFailed as err:
        status.stop()
        warn(f"Compiling of {exercise} failed! Please try again. Here's the output:")
        print(err.output.stderr)
        raise VerificationFailed(exercise) from err


def _compile_only(exercise: Exercise, success_hints: bool) -> bool:
    with _console().status(f"Compiling {exercise}...") as status:
        _compile(exercise, status).close()
    return prompt_for_completion(exercise, None, success_hints)


def _compile_and_run_interactively(exercise: Exercise, success_hints: bool) -> bool:
    with _console().status(f"Compiling {exercise}...") as status:
        with _compile(exercise, status) as compiled:
            status.update(f"Running {exercise}...")
            try:
                output = compiled.run()
            except ExerciseFailed as err:
                status.stop()
                warn(f"Ran {exercise} with errors")
                print(err.output.stdout)
                print(err.output.stderr)
                raise VerificationFailed(exercise) from err
    return prompt_for_completion(exercise, output.stdout, success_hints)


def compile_and_test(
    exercise: Exercise, run_mode: RunMode, verbose: bool, success_hints: bool
) -> bool:
    """Compile and run the test harness; return whether the exercise is complete."""
    with _console().status(f"Testing {exercise}...") as status:
        with _compile(exercise, status) as compiled:
            try:
                output = compiled.run()
            except ExerciseFailed as err:
                status.stop()
                warn(f"Testing of {exercise} failed! Please try again. Here's the output:")
                print(err.output.stdout)
                raise VerificationFailed(exercise) from err
    if verbose:
        print(output.stdout)
    if run_mode is RunMode.INTERACTIVE:
        return prompt_for_completion(exercise, None, success_hints)
    return True


def _separator() -> Text:
    return Text("====================", style="bold")


_VERBS = {
    Mode.COMPILE: "ran",
    Mode.TEST: "tested",
    Mode.CLIPPY: "compiled",
    Mode.BUILD_SCRIPT: "compiled",
}


def prompt_for_completion(
    exercise: Exercise, prompt_output: str | None, success_hints: bool
) -> bool:
    """Return True if the exercise is done; otherwise show where the marker is."""
    state = exercise.state()
    if state.is_done():
        return True

    success(f"Successfully {_VERBS[exercise.mode]} {exercise}!")

    emoji_off = no_emoji()
    clippy_message = (
        "The code is compiling, and Clippy is happy!"
        if emoji_off
        else "The code is compiling, and 📎 Clippy 📎 is happy!"
    )
    message = {
        Mode.COMPILE: "The code is compiling!",
        Mode.TEST: "The code is compiling, and the tests pass!",
        Mode.CLIPPY: clippy_message,
        Mode.BUILD_SCRIPT: "Build script works!",
    }[exercise.mode]

    console = _console()
    print()
    print(f"~*~ {message} ~*~" if emoji_off else f"🎉 🎉  {message} 🎉 🎉")
    print()

    if prompt_output is not None:
        print("Output:")
        console.print(_separator())
        print(prompt_output)
        console.print(_separator())
        print()
    if success_hints:
        print("Hints:")
        console.print(_separator())
        print(exercise.hint)
        console.print(_separator())
        print()

    print("You can keep working on this exercise,")
    console.print(
        Text.assemble(
            "or jump into the next one by removing the ",
            ("`I AM NOT DONE`", "bold"),
            " comment:",
        ),
        soft_wrap=True,
    )
    print()
    for context_line in state.context:
        console.print(
            Text.assemble(
                (f"{context_line.number:>2}", "bold blue"),
                " ",
                ("|", "blue"),
                "  ",
                (context_line.line, "bold" if context_line.important else ""),
            ),
            soft_wrap=True,
        )
    return False