from watch_attach.project_discovery import FileSystemProjectDiscovery


def _touch(root, relative):
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("")
    return path


def test_find_files_skips_build_output_and_sorts_shortest_first(tmp_path):
    deep = _touch(tmp_path, "src/nested/Deep/Deep.csproj")
    app = _touch(tmp_path, "App/App.csproj")
    lib = _touch(tmp_path, "Lib/Lib.csproj")
    _touch(tmp_path, "App/bin/Debug/Copy.csproj")
    _touch(tmp_path, "App/obj/Gen.csproj")
    _touch(tmp_path, "App/readme.md")

    assert FileSystemProjectDiscovery().find_files(tmp_path, "**/*.csproj") == [app, lib, deep]


def test_find_files_missing_root(tmp_path):
    assert FileSystemProjectDiscovery().find_files(tmp_path / "nope", "**/*.csproj") == []
