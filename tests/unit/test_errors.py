from watch_attach.errors import LaunchProfileError, ProjectResolutionError, TaskStartError, WatchAttachError


def test_project_resolution_error_keeps_context():
    error = ProjectResolutionError.not_found(".NET Core Watch", "App.csproj")

    assert isinstance(error, WatchAttachError)
    assert str(error) == (
        "The debug configuration '.NET Core Watch' references a project that cannot be found "
        "or is not unique (App.csproj)."
    )
    assert error.configuration_name == ".NET Core Watch"
    assert error.project == "App.csproj"


def test_default_message_comes_from_docstring():
    assert str(TaskStartError()) == "Build task runner failed to start the watch task."
    assert str(LaunchProfileError("bad file", path="x")) == "bad file"
    assert LaunchProfileError("bad file", path="x").path == "x"
