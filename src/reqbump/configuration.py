import dataclasses
import fnmatch
import logging
import typing as t
from pathlib import Path

from databind.core.settings import Alias

from reqbump.grammar import Ecosystem
from reqbump.util.toml_file import TomlFile

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class UpdaterConfig:
    """Policy switches for updating requirements. Loaded from the `reqbump.toml` file or the `[tool.reqbump]` section
    of `pyproject.toml` with #Configuration.load()."""

    #: When a requirement has to be widened and it contains a `!=` clause that excludes the target version, the
    #: clause is dropped. If disabled, such an update fails with an #UnrepresentableUpdate error instead.
    drop_unsatisfiable_exclusions: t.Annotated[bool, Alias("drop-unsatisfiable-exclusions")] = True

    #: When a version is rewritten at the precision of the original version (e.g. `~> 1.4.0`) and the target has
    #: fewer segments, the missing segments are filled with zeros. If disabled, the result is truncated instead.
    pad_precision: t.Annotated[bool, Alias("pad-precision")] = True

    #: Glob patterns for the names of manifest files whose requirements should be widened into ranges rather than
    #: bumped. Useful for library manifests that should not pin their users to the latest version.
    widen_ranges_for: t.Annotated[t.List[str], Alias("widen-ranges-for")] = dataclasses.field(
        default_factory=lambda: ["setup.py"]
    )

    #: Maps glob patterns for manifest file names to the ecosystem whose grammar is used to parse its requirements,
    #: overriding the ecosystem implied by the package manager of a dependency.
    file_ecosystems: t.Annotated[t.Dict[str, str], Alias("file-ecosystems")] = dataclasses.field(default_factory=dict)

    def __post_init__(self) -> None:
        for pattern, name in self.file_ecosystems.items():
            try:
                Ecosystem.parse(name)
            except ValueError as exc:
                raise ValueError(f"invalid ecosystem for file pattern {pattern!r}: {exc}") from exc

    def ecosystem_for(self, file_name: str, default: Ecosystem) -> Ecosystem:
        """Returns the ecosystem to use for requirements in the given file."""

        for pattern, name in self.file_ecosystems.items():
            if _matches(file_name, pattern):
                return Ecosystem.parse(name)
        return default

    def widens_ranges(self, file_name: str) -> bool:
        """Returns `True` if requirements in the given file should be widened into ranges."""

        return any(_matches(file_name, pattern) for pattern in self.widen_ranges_for)


def _matches(file_name: str, pattern: str) -> bool:
    return fnmatch.fnmatch(file_name, pattern) or fnmatch.fnmatch(Path(file_name).name, pattern)


class Configuration:
    """Represents the configuration stored in a directory, which is either read from `reqbump.toml` or
    `pyproject.toml`."""

    #: The directory that contains the configuration files. The existence of neither file is required.
    directory: Path

    pyproject_toml: TomlFile

    reqbump_toml: TomlFile

    def __init__(self, directory: Path) -> None:
        self.directory = directory
        self.pyproject_toml = TomlFile(directory / "pyproject.toml")
        self.reqbump_toml = TomlFile(directory / "reqbump.toml")

    def __repr__(self) -> str:
        return f'{type(self).__name__}(directory="{self.directory}")'

    def get_raw_configuration(self) -> t.Dict[str, t.Any]:
        """Loads the raw configuration data from either the `reqbump.toml` configuration file or `pyproject.toml`
        under the `[tool.reqbump]` section. If neither of the files exist or the section in the pyproject does not
        exist, an empty dictionary will be returned."""

        if self.reqbump_toml.exists():
            logger.debug("Reading configuration for %s from %s", self, self.reqbump_toml.path)
            return self.reqbump_toml.value()
        if self.pyproject_toml.exists():
            logger.debug("Reading configuration for %s from %s", self, self.pyproject_toml.path)
            return self.pyproject_toml.value().get("tool", {}).get("reqbump", {})
        return {}

    def load(self) -> UpdaterConfig:
        """Deserialize the raw configuration into an #UpdaterConfig."""

        import databind.json

        source = self.reqbump_toml if self.reqbump_toml.exists() else self.pyproject_toml
        return databind.json.load(self.get_raw_configuration(), UpdaterConfig, filename=str(source.path))


def load_config(directory: t.Union[Path, str]) -> UpdaterConfig:
    return Configuration(Path(directory)).load()
