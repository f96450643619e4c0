"""File Dependencies Agent configuration."""

from pathlib import Path

from src.shared.config import BaseAgentSettings


class FileDependenciesSettings(BaseAgentSettings):
    """Settings specific to the File Dependencies Agent."""

    agent_name: str = "file_dependencies"
    host: str = "0.0.0.0"
    port: int = 8005

    # Project whose files are analysed; empty means the working directory
    project_root: str = ""

    # Side-channel copy of the XML report
    output_dir: str = "/tmp"
    output_filename: str = "deps.log"
    unique_output: bool = True

    # Upper bound on files visited by the import provider
    max_files: int = 2000
    preview_limit: int = 3

    class Config(BaseAgentSettings.Config):
        env_prefix = "FILE_DEPS_"

    def resolved_project_root(self) -> Path:
        """Absolute project root, defaulting to the current directory."""
        root = Path(self.project_root) if self.project_root else Path.cwd()
        return root.expanduser().resolve()

    def output_path_for(self, request_id: str) -> str:
        """
        Destination of the persisted XML report for one invocation.

        With ``unique_output`` each request gets its own file
        (``deps-<request_id>.log``); otherwise every request shares
        ``output_dir/output_filename`` and the last writer wins.
        """
        if not self.unique_output:
            return str(Path(self.output_dir) / self.output_filename)
        stem = Path(self.output_filename).stem
        suffix = Path(self.output_filename).suffix
        return str(Path(self.output_dir) / f"{stem}-{request_id}{suffix}")
