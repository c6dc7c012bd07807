"""
Unit tests for BuildOrchestrator.

Tests the complete build step including:
- Stub and skip handling when IKVM is not configured
- Installation checks
- Dependency classification and command assembly
- Code-only extraction
- Execution and publishing
"""

import zipfile

import pytest
from pathlib import Path
from unittest.mock import Mock

from ikvmbuild.build import (
    BuildOrchestrator,
    CompilationError,
    CompilationExecutor,
    ExecutionResult,
    ExtractionError,
)
from ikvmbuild.config import (
    BuildConfiguration,
    ConfigurationError,
    DependencyArtifact,
    ResolutionError,
)


# Test fixtures

@pytest.fixture
def ikvm_home(tmp_path):
    """Create a fake IKVM installation."""
    home = tmp_path / "ikvm"
    (home / "bin").mkdir(parents=True)
    (home / "bin" / "ikvmc.exe").write_bytes(b"MZ")
    (home / "bin" / "IKVM.Runtime.dll").write_bytes(b"runtime")
    return home


@pytest.fixture
def lib_dir(tmp_path):
    lib = tmp_path / "mono" / "2.1"
    lib.mkdir(parents=True)
    return lib


@pytest.fixture
def repo(tmp_path):
    """Create a jar, a dll and a test-scoped jar."""
    repo = tmp_path / "repo"
    repo.mkdir()
    with zipfile.ZipFile(repo / "core-1.0.jar", "w") as zf:
        zf.writestr("com/example/Core.class", b"\xca\xfe\xba\xbe")
        zf.writestr("com/example/core.properties", b"a=b")
    (repo / "opentk-1.0.dll").write_bytes(b"opentk")
    with zipfile.ZipFile(repo / "junit-4.jar", "w") as zf:
        zf.writestr("org/junit/Test.class", b"\xca\xfe\xba\xbe")
    return repo


@pytest.fixture
def dependencies(repo):
    return [
        DependencyArtifact(group="com.example", name="core", path=repo / "core-1.0.jar", version="1.0"),
        DependencyArtifact(group="org.opentk", name="opentk", path=repo / "opentk-1.0.dll", type="dll"),
        DependencyArtifact(group="junit", name="junit", path=repo / "junit-4.jar", scope="test"),
    ]


@pytest.fixture
def make_config(tmp_path, ikvm_home, lib_dir):
    def _make(**kwargs):
        defaults = dict(
            output_dir=tmp_path / "target",
            final_name="game-1.0",
            compiler_install_path=ikvm_home,
            base_library_path=lib_dir,
        )
        defaults.update(kwargs)
        return BuildConfiguration(**defaults)
    return _make


@pytest.fixture
def mock_executor():
    executor = Mock(spec=CompilationExecutor)
    executor.execute = Mock(return_value=ExecutionResult(returncode=0, stdout="", stderr=""))
    return executor


class TestBuildOrchestratorSkip:
    """Builds without a configured IKVM installation."""

    def test_stub_created(self, tmp_path, dependencies, mock_executor):
        config = BuildConfiguration(
            output_dir=tmp_path / "target", final_name="game-1.0", create_stub_on_missing_tool=True
        )
        registered = []
        orchestrator = BuildOrchestrator(executor=mock_executor, on_artifact=registered.append)

        result = orchestrator.build(config, dependencies)

        assert result.success and result.skipped
        assert config.artifact_path.exists()
        assert config.artifact_path.stat().st_size == 0
        assert registered == [config.artifact_path]
        mock_executor.execute.assert_not_called()

    def test_skipped_without_stub(self, tmp_path, dependencies, mock_executor, caplog):
        config = BuildConfiguration(output_dir=tmp_path / "target", final_name="game-1.0")
        registered = []
        orchestrator = BuildOrchestrator(executor=mock_executor, on_artifact=registered.append)

        result = orchestrator.build(config, dependencies)

        assert result.success and result.skipped
        assert result.artifact_path == config.artifact_path
        assert not config.artifact_path.exists()
        assert config.output_dir.is_dir()
        assert registered == [config.artifact_path]
        assert "Skipping IKVM build" in caplog.text
        mock_executor.execute.assert_not_called()

    def test_dependencies_not_resolved_when_skipped(self, tmp_path, mock_executor):
        """Test the resolver is never consulted for a skipped build."""
        def resolver():
            raise ResolutionError("should not be called")
            yield  # pragma: no cover

        config = BuildConfiguration(output_dir=tmp_path / "target", final_name="x")
        result = BuildOrchestrator(executor=mock_executor).build(config, resolver())
        assert result.skipped


class TestBuildOrchestratorChecks:
    """Pre-flight installation checks."""

    def test_install_path_not_a_directory(self, make_config, tmp_path, dependencies):
        config = make_config(compiler_install_path=tmp_path / "nowhere")
        with pytest.raises(ConfigurationError, match="non-existent directory"):
            BuildOrchestrator().build(config, dependencies)
        # artifact path is registered before the failure
        assert config.output_dir.is_dir()

    def test_missing_ikvmc(self, make_config, ikvm_home, dependencies):
        (ikvm_home / "bin" / "ikvmc.exe").unlink()
        with pytest.raises(ConfigurationError, match="Unable to find ikvmc"):
            BuildOrchestrator().build(make_config(), dependencies)

    def test_explicit_ikvmc(self, make_config, tmp_path, dependencies, mock_executor):
        custom = tmp_path / "tools" / "ikvmc.exe"
        custom.parent.mkdir()
        custom.write_bytes(b"MZ")

        result = BuildOrchestrator(executor=mock_executor).build(
            make_config(compiler_executable=custom), dependencies
        )
        assert str(custom) in result.invocation.argv

    def test_missing_base_library_dir_warns(self, make_config, tmp_path, dependencies, mock_executor, caplog):
        config = make_config(base_library_path=tmp_path / "no-mono")
        result = BuildOrchestrator(executor=mock_executor).build(config, dependencies)

        assert result.success
        assert "base-library-path is not a directory" in caplog.text
        assert "-r:mscorlib.dll" in result.invocation.argv

    def test_resolution_failure(self, make_config, mock_executor):
        def resolver():
            raise RuntimeError("boom")
            yield  # pragma: no cover

        with pytest.raises(ResolutionError, match="boom"):
            BuildOrchestrator(executor=mock_executor).build(make_config(), resolver())
        mock_executor.execute.assert_not_called()


class TestBuildOrchestratorBuild:
    """Full builds with a mocked ikvmc."""

    def test_build_runs_command(self, make_config, dependencies, repo, mock_executor):
        config = make_config()

        result = BuildOrchestrator(executor=mock_executor).build(config, dependencies)

        assert result.success and not result.skipped
        assert result.artifact_path == config.artifact_path
        invocation = mock_executor.execute.call_args[0][0]
        assert invocation is result.invocation
        assert f"-out:{config.artifact_path}" in invocation.argv
        assert f"-r:{repo / 'opentk-1.0.dll'}" in invocation.argv
        assert invocation.argv[-1] == str(repo / "core-1.0.jar")
        assert str(repo / "junit-4.jar") not in invocation.argv

    def test_code_only_extracts_classes(self, make_config, dependencies, mock_executor):
        config = make_config(compile_code_only=True)

        result = BuildOrchestrator(executor=mock_executor).build(config, dependencies)

        assert (config.scratch_dir / "com" / "example" / "Core.class").exists()
        assert not (config.scratch_dir / "com" / "example" / "core.properties").exists()
        # test-scoped jars and dll references are never extracted
        assert not (config.scratch_dir / "org").exists()
        assert result.invocation.argv[-1].startswith(f"-recurse:{config.scratch_dir}")

    def test_code_only_creates_scratch_dir_without_jars(self, make_config, mock_executor):
        config = make_config(compile_code_only=True)
        BuildOrchestrator(executor=mock_executor).build(config, [])
        assert config.scratch_dir.is_dir()

    def test_scratch_dir_kept_between_builds(self, make_config, dependencies, mock_executor):
        config = make_config(compile_code_only=True)
        config.scratch_dir.mkdir(parents=True)
        (config.scratch_dir / "Old.class").write_bytes(b"old")

        BuildOrchestrator(executor=mock_executor).build(config, dependencies)

        assert (config.scratch_dir / "Old.class").exists()

    def test_clean_removes_scratch_dir(self, make_config, dependencies, mock_executor):
        config = make_config(compile_code_only=True)
        config.scratch_dir.mkdir(parents=True)
        (config.scratch_dir / "Old.class").write_bytes(b"old")

        BuildOrchestrator(executor=mock_executor).build(config, dependencies, clean=True)

        assert not (config.scratch_dir / "Old.class").exists()
        assert (config.scratch_dir / "com" / "example" / "Core.class").exists()

    def test_extraction_failure_aborts(self, make_config, tmp_path, mock_executor):
        bad = tmp_path / "bad.jar"
        bad.write_bytes(b"not a zip")
        deps = [DependencyArtifact(group="g", name="bad", path=bad)]

        with pytest.raises(ExtractionError):
            BuildOrchestrator(executor=mock_executor).build(make_config(compile_code_only=True), deps)
        mock_executor.execute.assert_not_called()

    def test_publishes_after_success(self, make_config, dependencies, mock_executor):
        config = make_config(copy_files=("bin/IKVM.Runtime.dll",), copy_reference_dependencies=True)

        result = BuildOrchestrator(executor=mock_executor).build(config, dependencies)

        assert result.copied_files == [
            config.output_dir / "IKVM.Runtime.dll",
            config.output_dir / "opentk.dll",
        ]
        assert (config.output_dir / "opentk.dll").read_bytes() == b"opentk"

    def test_nothing_copied_when_compilation_fails(self, make_config, dependencies, mock_executor):
        mock_executor.execute.side_effect = CompilationError("ikvmc failed")
        config = make_config(copy_files=("bin/IKVM.Runtime.dll",))

        with pytest.raises(CompilationError):
            BuildOrchestrator(executor=mock_executor).build(config, dependencies)

        assert not (config.output_dir / "IKVM.Runtime.dll").exists()

    def test_default_executor_uses_escalation_flag(self, make_config, dependencies, monkeypatch):
        created = []

        class RecordingExecutor:
            def __init__(self, escalate_warnings=False, **kwargs):
                created.append(escalate_warnings)

            def execute(self, invocation):
                return ExecutionResult(returncode=0, stdout="", stderr="")

        monkeypatch.setattr("ikvmbuild.build.orchestrator.CompilationExecutor", RecordingExecutor)
        BuildOrchestrator().build(make_config(escalate_warnings=True), dependencies)
        assert created == [True]

    def test_prepare_command_does_not_run(self, make_config, dependencies, mock_executor):
        invocation, classified = BuildOrchestrator(executor=mock_executor).prepare_command(
            make_config(), dependencies
        )
        assert [a.name for a in classified.compile_units] == ["core"]
        assert [a.name for a in classified.references] == ["opentk"]
        assert invocation.argv
        mock_executor.execute.assert_not_called()
