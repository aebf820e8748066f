import subprocess
from pathlib import Path
from unittest import mock

import pytest

from rustlings.exercise import (
    CompiledExercise,
    ContextLine,
    Exercise,
    ExerciseFailed,
    ExerciseOutput,
    Mode,
    State,
    clean,
    load_exercises,
    temp_file_path,
)

PENDING = "// fake_exercise\n\n// I AM NOT DONE\n\nfn main() {\n\n}\n"
FINISHED = "// fake_exercise\n\nfn main() {\n\n}\n"
TEST_SUCCESS = '#[test]\nfn passing() {\n    println!("THIS TEST TOO SHALL PASS");\n    assert!(true);\n}\n'


def _done(returncode=0, stdout=b"", stderr=b""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _exercise(directory, name, content, mode=Mode.COMPILE):
    path = directory / f"{name}.rs"
    path.write_text(content)
    return Exercise(name=name, path=path, mode=mode, hint="")


def test_pending_state(tmp_path):
    exercise = _exercise(tmp_path, "pending_exercise", PENDING)
    expected = (
        ContextLine(line="// fake_exercise", number=1, important=False),
        ContextLine(line="", number=2, important=False),
        ContextLine(line="// I AM NOT DONE", number=3, important=True),
        ContextLine(line="", number=4, important=False),
        ContextLine(line="fn main() {", number=5, important=False),
    )
    assert exercise.state() == State(expected)
    assert exercise.looks_done() is False


def test_finished_exercise(tmp_path):
    exercise = _exercise(tmp_path, "finished_exercise", FINISHED)
    assert exercise.state() == State()
    assert exercise.state().is_done()
    assert exercise.looks_done() is True


def test_marker_on_first_line_limits_context(tmp_path):
    exercise = _exercise(tmp_path, "top", "// I AM NOT DONE\n\n#[test]\nfn it_works() {}\n")
    context = exercise.state().context
    assert [c.number for c in context] == [1, 2, 3]
    assert [c.important for c in context] == [True, False, False]


@pytest.mark.parametrize(
    "marker",
    ["// I AM NOT DONE", "/// I AM NOT DONE", "    //   I  AM\tNOT   DONE", "//I AM NOT DONE"],
)
def test_marker_variants_are_pending(tmp_path, marker):
    exercise = _exercise(tmp_path, "variant", f"fn main() {{}}\n{marker}\n")
    assert exercise.looks_done() is False


@pytest.mark.parametrize("text", ["// I AM DONE", "let s = \"I AM NOT DONE\";", "// i am not done"])
def test_non_markers_are_done(tmp_path, text):
    exercise = _exercise(tmp_path, "other", f"{text}\nfn main() {{}}\n")
    assert exercise.looks_done() is True


def test_crlf_lines_are_trimmed(tmp_path):
    path = tmp_path / "crlf.rs"
    path.write_bytes(b"a\r\n// I AM NOT DONE\r\nb\r\n")
    exercise = Exercise(name="crlf", path=path, mode=Mode.COMPILE)
    assert [c.line for c in exercise.state().context] == ["a", "// I AM NOT DONE", "b"]


def test_missing_file_raises(tmp_path):
    exercise = Exercise(name="gone", path=tmp_path / "gone.rs", mode=Mode.COMPILE)
    with pytest.raises(FileNotFoundError):
        exercise.state()


def test_display_is_path(tmp_path):
    exercise = _exercise(tmp_path, "shown", FINISHED)
    assert str(exercise) == str(tmp_path / "shown.rs")


def test_clean(workdir):
    Path(temp_file_path()).touch()
    exercise = _exercise(workdir, "example", PENDING)
    with mock.patch("subprocess.run", return_value=_done()):
        compiled = exercise.compile()
    compiled.close()
    assert not Path(temp_file_path()).exists()


def test_clean_without_file_is_silent(workdir):
    clean()
    assert not Path(temp_file_path()).exists()


def test_context_manager_cleans(workdir):
    exercise = _exercise(workdir, "example", PENDING)
    with mock.patch("subprocess.run", return_value=_done()):
        with exercise.compile() as compiled:
            Path(temp_file_path()).touch()
            assert compiled.exercise is exercise
    assert not Path(temp_file_path()).exists()


def test_exercise_with_output(workdir):
    exercise = _exercise(workdir, "exercise_with_output", TEST_SUCCESS, Mode.TEST)
    responses = [_done(), _done(stdout=b"running 1 test\nTHIS TEST TOO SHALL PASS\n")]
    with mock.patch("subprocess.run", side_effect=responses) as fake:
        with exercise.compile() as compiled:
            out = compiled.run()
    assert "THIS TEST TOO SHALL PASS" in out.stdout
    compile_args = fake.call_args_list[0].args[0]
    run_args = fake.call_args_list[1].args[0]
    assert compile_args[:2] == ["rustc", "--test"]
    assert "--edition" in compile_args
    assert run_args == [temp_file_path(), "--show-output"]


def test_compile_failure_raises_with_output(workdir):
    Path(temp_file_path()).touch()
    exercise = _exercise(workdir, "broken", "fn main() {\n    let\n}\n")
    with mock.patch("subprocess.run", return_value=_done(1, b"", b"error: expected pattern")):
        with pytest.raises(ExerciseFailed) as info:
            exercise.compile()
    assert info.value.output == ExerciseOutput(stdout="", stderr="error: expected pattern")
    assert not Path(temp_file_path()).exists()


def test_run_failure_raises(workdir):
    exercise = _exercise(workdir, "failing", FINISHED)
    responses = [_done(), _done(101, b"partial", b"panicked")]
    with mock.patch("subprocess.run", side_effect=responses):
        with exercise.compile() as compiled:
            with pytest.raises(ExerciseFailed) as info:
                compiled.run()
    assert info.value.output.stdout == "partial"
    assert info.value.output.stderr == "panicked"


def test_build_script_run_returns_empty_output(workdir):
    (workdir / "exercises" / "tests").mkdir(parents=True)
    exercise = _exercise(workdir, "build1", FINISHED, Mode.BUILD_SCRIPT)
    with mock.patch("subprocess.run", return_value=_done()) as fake:
        with exercise.compile() as compiled:
            out = compiled.run()
    assert out == ExerciseOutput(stdout="", stderr="")
    assert fake.call_count == 1
    assert fake.call_args.args[0][:2] == ["cargo", "test"]
    manifest = (workdir / "exercises" / "tests" / "Cargo.toml").read_text()
    assert 'name = "build1"' in manifest
    assert 'path = "build1.rs"' in manifest


def test_clippy_writes_manifest_and_runs_clippy(workdir):
    (workdir / "exercises" / "clippy").mkdir(parents=True)
    exercise = _exercise(workdir, "clippy1", FINISHED, Mode.CLIPPY)
    with mock.patch("subprocess.run", return_value=_done()) as fake:
        compiled = exercise.compile()
    assert isinstance(compiled, CompiledExercise)
    commands = [call.args[0][:2] for call in fake.call_args_list]
    assert commands == [["rustc", str(exercise.path)], ["cargo", "clean"], ["cargo", "clippy"]]
    assert fake.call_args_list[-1].args[0][-4:] == ["-D", "warnings", "-D", "clippy::float_cmp"]
    manifest = (workdir / "exercises" / "clippy" / "Cargo.toml").read_text()
    assert manifest.startswith("[package]\n")
    assert 'edition = "2021"' in manifest


def test_clippy_manifest_write_failure(workdir, monkeypatch):
    monkeypatch.setenv("NO_EMOJI", "1")
    exercise = _exercise(workdir, "clippy1", FINISHED, Mode.CLIPPY)
    with pytest.raises(OSError, match="Failed to write Clippy Cargo.toml file."):
        exercise.compile()


def test_load_exercises(tmp_path):
    info = tmp_path / "info.toml"
    info.write_text(
        '[[exercises]]\nname = "intro1"\npath = "exercises/intro/intro1.rs"\nmode = "compile"\nhint = "Hello!"\n\n'
        '[[exercises]]\nname = "build"\npath = "exercises/tests/build.rs"\nmode = "buildscript"\nhint = ""\n'
    )
    exercises = load_exercises(info)
    assert [e.name for e in exercises] == ["intro1", "build"]
    assert exercises[0].mode is Mode.COMPILE
    assert exercises[0].hint == "Hello!"
    assert exercises[0].path == Path("exercises/intro/intro1.rs")
    assert exercises[1].mode is Mode.BUILD_SCRIPT


def test_load_exercises_bad_mode(tmp_path):
    info = tmp_path / "info.toml"
    info.write_text('[[exercises]]\nname = "x"\npath = "x.rs"\nmode = "bogus"\nhint = ""\n')
    with pytest.raises(ValueError):
        load_exercises(info)


def test_load_exercises_missing_field(tmp_path):
    info = tmp_path / "info.toml"
    info.write_text('[[exercises]]\nname = "x"\npath = "x.rs"\nmode = "test"\n')
    with pytest.raises(ValueError, match="hint"):
        load_exercises(info)