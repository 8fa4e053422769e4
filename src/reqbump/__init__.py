""" Update the version requirements of a dependency so that they admit a new version, for the requirement grammars
of pip, Bundler, npm/Yarn and Composer. """

from reqbump.configuration import UpdaterConfig, load_config
from reqbump.dependency import Dependency, DependencyRequirement, RequirementsUpdater, update_dependency
from reqbump.errors import MalformedVersion, RequirementError, UnrecognizedConstraint, UnrepresentableUpdate
from reqbump.grammar import Ecosystem, get_grammar, parse_requirement
from reqbump.patcher import find_requirement_refs, replace_requirement
from reqbump.updater import RequirementUpdater, UpdateStrategy, update_requirement
from reqbump.version import SemanticVersion

__version__ = "0.1.0"

__all__ = [
    "Dependency",
    "DependencyRequirement",
    "Ecosystem",
    "MalformedVersion",
    "RequirementError",
    "RequirementUpdater",
    "RequirementsUpdater",
    "SemanticVersion",
    "UnrecognizedConstraint",
    "UnrepresentableUpdate",
    "UpdateStrategy",
    "UpdaterConfig",
    "find_requirement_refs",
    "get_grammar",
    "load_config",
    "parse_requirement",
    "replace_requirement",
    "update_dependency",
    "update_requirement",
]
