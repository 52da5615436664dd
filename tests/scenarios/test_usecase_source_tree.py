"""Source tree use case: collecting inputs for a build step."""
from dirglob import FNM_CASEFOLD, DirectoryService, MemoryAccessor


def make_project():
    accessor = MemoryAccessor(cwd="/work")
    accessor.populate(
        [
            "/work/project/setup.cfg",
            "/work/project/src/app/__init__.py",
            "/work/project/src/app/core.py",
            "/work/project/src/app/cli.py",
            "/work/project/src/app/data/schema.JSON",
            "/work/project/src/app/.cache/core.py",
            "/work/project/tests/test_core.py",
            "/work/project/docs/index.md",
            "/work/project/build/",
        ]
    )
    return accessor, DirectoryService(accessor)


def test_collect_python_sources():
    """All modules below src, none from hidden caches."""
    _, svc = make_project()
    assert svc.glob("project/src/**/*.py") == [
        "project/src/app/__init__.py",
        "project/src/app/cli.py",
        "project/src/app/core.py",
    ]


def test_collect_from_several_roots():
    """One brace pattern per root, results merged and sorted."""
    _, svc = make_project()
    assert svc.glob("{src,tests}/**/*.py", base="project") == [
        "src/app/__init__.py",
        "src/app/cli.py",
        "src/app/core.py",
        "tests/test_core.py",
    ]


def test_data_files_any_case():
    _, svc = make_project()
    assert svc.glob("**/*.json", FNM_CASEFOLD, base="/work/project") == [
        "src/app/data/schema.JSON"
    ]


def test_build_inside_project_directory():
    """A build step runs inside the project and the caller's cwd comes back."""
    accessor, svc = make_project()

    def build():
        outputs = []
        for source in svc.glob("src/**/*.py"):
            name = source.rsplit("/", 1)[-1].replace(".py", ".o")
            accessor.touch("build/" + name)
            outputs.append(name)
        return outputs

    assert svc.with_directory("project", build) == ["__init__.o", "cli.o", "core.o"]
    assert svc.getcwd() == "/work"
    assert svc.children("project/build") == ["__init__.o", "cli.o", "core.o"]


def test_top_level_directories():
    _, svc = make_project()
    with svc.open_directory("project") as d:
        assert svc.glob("*/", base=d) == ["build/", "docs/", "src/", "tests/"]
