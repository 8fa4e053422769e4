""" The dependency model: a dependency is declared in one or more manifest files, each with its own requirement
string. #RequirementsUpdater updates each of them independently for the same target version. """

from __future__ import annotations

import dataclasses
import logging
import typing as t

from reqbump.configuration import UpdaterConfig
from reqbump.grammar import Ecosystem
from reqbump.updater import RequirementUpdater, UpdateStrategy, UpdateTarget, VersionLike

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class DependencyRequirement:
    """The requirement for a dependency as declared in a single manifest file."""

    #: The name of the manifest file, e.g. `requirements.txt` or `Gemfile`.
    file: str

    #: The requirement string, or `None` if the file declares the dependency without a requirement.
    requirement: str | None

    #: The dependency groups the dependency belongs to in this file (e.g. `development`).
    groups: list[str] = dataclasses.field(default_factory=list)

    #: Details on where the dependency is installed from, if not from the default registry.
    source: dict[str, t.Any] | None = None

    def __post_init__(self) -> None:
        if self.requirement == "":
            raise ValueError("blank strings must not be provided as requirements")


@dataclasses.dataclass
class Dependency:
    """A dependency of a project."""

    name: str

    #: The name of the package manager, e.g. `pip`, `bundler`, `npm`, `yarn` or `composer`.
    package_manager: str

    requirements: list[DependencyRequirement]

    #: The version that is currently resolved (e.g. from a lockfile), if known.
    version: str | None = None

    #: After an update, the version that was resolved before.
    previous_version: str | None = None

    #: After an update, the requirements before the update.
    previous_requirements: list[DependencyRequirement] | None = None

    def __post_init__(self) -> None:
        if "" in (self.version, self.previous_version):
            raise ValueError("blank strings must not be provided as versions")
        for field in (self.requirements, self.previous_requirements):
            if field is not None and not all(isinstance(r, DependencyRequirement) for r in field):
                raise TypeError("requirements must be a list of DependencyRequirement objects")

    @property
    def ecosystem(self) -> Ecosystem:
        return Ecosystem.parse(self.package_manager)

    def appears_in_lockfile(self) -> bool:
        return bool(self.previous_version or (self.version and self.previous_requirements is None))

    def to_json(self) -> dict[str, t.Any]:
        return dataclasses.asdict(self)


class RequirementsUpdater:
    """Updates the requirements of a dependency in all of the files that declare it. There is no coupling between the
    files; each requirement is updated on its own with the same target version.

    Arguments:
      dependency: The dependency whose requirements are updated. Its package manager determines the ecosystem,
        unless the file name is mapped to another one with #UpdaterConfig.file_ecosystems.
      latest_version: The latest version that is available at all. Only informative; it is stored on #target but the
        requirements are updated for the *latest_resolvable_version* alone.
      latest_resolvable_version: The version to update the requirements for.
      config: Policy switches. Uses the defaults of #UpdaterConfig if not specified.
    """

    def __init__(
        self,
        dependency: Dependency,
        latest_version: VersionLike | None,
        latest_resolvable_version: VersionLike | None,
        config: UpdaterConfig | None = None,
    ) -> None:
        self.dependency = dependency
        self.target = UpdateTarget.of(latest_resolvable_version, latest_version)
        self.config = config or UpdaterConfig()

    def get_updater(self, file: str) -> RequirementUpdater:
        ecosystem = self.config.ecosystem_for(file, self.dependency.ecosystem)
        strategy = UpdateStrategy.WIDEN_RANGES if self.config.widens_ranges(file) else UpdateStrategy.BUMP
        return RequirementUpdater(ecosystem, strategy, self.config)

    def updated_requirements(self) -> list[DependencyRequirement]:
        """Returns the updated requirements in the same order. Requirements that do not change are returned as-is.
        Errors are not caught; a failure for any file fails the whole dependency."""

        if self.target.latest_resolvable_version is None:
            return list(self.dependency.requirements)

        result = []
        for req in self.dependency.requirements:
            if req.requirement is None:
                result.append(req)
                continue
            updater = self.get_updater(req.file)
            new_requirement = updater.update(req.requirement, self.target.latest_resolvable_version)
            if new_requirement == req.requirement:
                result.append(req)
                continue
            logger.debug("Updated requirement in %s from %r to %r", req.file, req.requirement, new_requirement)
            result.append(dataclasses.replace(req, requirement=new_requirement))
        return result


def update_dependency(
    dependency: Dependency,
    latest_resolvable_version: VersionLike | None,
    latest_version: VersionLike | None = None,
    config: UpdaterConfig | None = None,
) -> Dependency:
    """Returns a copy of the *dependency* that is updated to the *latest_resolvable_version*, with the requirements of
    all of its files updated accordingly and the previous state recorded in the `previous_*` fields. If there is no
    resolvable version, the dependency is returned unchanged. The *latest_version* is informative only and does not
    influence the updated requirements."""

    updater = RequirementsUpdater(dependency, latest_version, latest_resolvable_version, config)
    if updater.target.latest_resolvable_version is None:
        return dependency

    return Dependency(
        name=dependency.name,
        package_manager=dependency.package_manager,
        requirements=updater.updated_requirements(),
        version=str(updater.target.latest_resolvable_version),
        previous_version=dependency.version,
        previous_requirements=dependency.requirements,
    )
