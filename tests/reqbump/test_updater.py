import pytest
from packaging.specifiers import SpecifierSet
from semantic_version import NpmSpec, Version

from reqbump.configuration import UpdaterConfig
from reqbump.errors import MalformedVersion, UnrecognizedConstraint, UnrepresentableUpdate
from reqbump.updater import RequirementUpdater, UpdateStrategy, update_requirement


@pytest.mark.parametrize(
    "ecosystem,requirement,target,expected",
    [
        ("bundler", "~> 1.4.0", "1.9.0", "~> 1.9.0"),
        ("yarn", "^1.2.3", "1.5.0", "^1.5.0"),
        ("pip", "==2.6.*", "2.6.1", "==2.6.*"),
        ("pip", "==2.6.*", "3.0.0", "==3.0.*"),
        ("pip", "<=1.0.0", "1.5.2", "<2.0.0"),
        ("pip", ">1.0.0,<1.5.0", "1.5.0", ">1.0.0,<1.6.0"),
        ("yarn", "1.2.3", "2.0.0", "2.0.0"),
    ],
)
def test__update_requirement__scenarios(ecosystem, requirement, target, expected):
    assert update_requirement(requirement, ecosystem, target) == expected


@pytest.mark.parametrize(
    "requirement,expected",
    [
        ("0.1", "1.5"),
        ("1.1.0.1", "1.5.0"),
        ("^1.2.3-rc1", "^1.5.0"),
        ("^0.x.x-rc1", "^1.x.x"),
        ("~1.2.0", "~1.5.0"),
        ("1.2.x", "1.5.x"),
        ("^v1.2.0", "^v1.5.0"),
        (">=1.0.0 <1.5.0", ">=1.0.0 <1.6.0"),
        (">=1.0.0", ">=1.0.0"),
        ("*", "*"),
    ],
)
def test__update_requirement__yarn(requirement, expected):
    assert update_requirement(requirement, "yarn", "1.5.0") == expected


@pytest.mark.parametrize(
    "requirement,expected",
    [
        ("> 1.0.0, < 1.5.0", "> 1.0.0, < 1.6.0"),
        ("~> 1.0", "~> 1.5"),
        ("~> 1.4.0, >= 1.4.2", "~> 1.5.0, >= 1.4.2"),
        ("= 1.2.0", "= 1.5.0"),
        (">= 1.0", ">= 1.0"),
        ("< 1.5", "< 1.6"),
    ],
)
def test__update_requirement__bundler(requirement, expected):
    assert update_requirement(requirement, "bundler", "1.5.0") == expected


@pytest.mark.parametrize(
    "requirement,expected",
    [
        ("^1.0", "^1.5"),
        ("~1.2.0", "~1.5.0"),
        ("1.0.*", "1.5.*"),
        ("v1.2.0", "v1.5.0"),
        (">=1.0,<1.5", ">=1.0,<1.6"),
        (">=1.0 <1.5", ">=1.0 <1.6"),
    ],
)
def test__update_requirement__composer(requirement, expected):
    assert update_requirement(requirement, "composer", "1.5.0") == expected


@pytest.mark.parametrize(
    "requirement,target",
    [
        ("==2.6.*", "3.0.0"),
        ("<=1.0.0", "1.5.2"),
        (">1.0.0,<1.5.0", "1.5.0"),
        ("~=1.4.0", "1.9.3"),
        ("==1.0.0", "2.0.0rc1"),
        (">=1.0,!=1.5.0,<1.5", "1.5.0"),
        ("~=1.4", "2.0"),
        (">=2.0", "2.0.post1"),
        ("<=2.0", "2.0.post1"),
        ("<2.0", "2.0.post1"),
        ("<1.0", "1.0.dev0"),
        ("<1.0a1", "1.0.dev0"),
        ("==1.0.0", "1.1.dev3"),
        ("~=1.4", "2.0.post1"),
    ],
)
def test__update_requirement__pip_result_admits_target(requirement, target):
    result = update_requirement(requirement, "pip", target)
    assert SpecifierSet(result).contains(target, prereleases=True)


def test__update_requirement__pip_orders_post_and_dev_releases():
    assert update_requirement(">=2.0", "pip", "2.0.post1") == ">=2.0"
    assert update_requirement("<=2.0", "pip", "2.0.post1") == "<3.0"
    assert update_requirement("<1.0a1", "pip", "1.0.dev0") == "<1.0a1"
    assert update_requirement(">=1.0.dev0,<1.0rc1", "pip", "1.0b2") == ">=1.0.dev0,<1.0rc1"
    with pytest.raises(UnrepresentableUpdate):
        update_requirement(">=2.0.post2", "pip", "2.0.post1")


def test__update_requirement__pip_rejects_versions_outside_pep440():
    with pytest.raises(MalformedVersion):
        update_requirement(">=1.0", "pip", "1.0-foo")
    with pytest.raises(UnrecognizedConstraint):
        update_requirement("==1.0-foo", "pip", "2.0")


@pytest.mark.parametrize(
    "requirement,target",
    [
        ("1.2.3", "2.0.0"),
        ("0.1", "1.5.0"),
        ("1.1.0.1", "1.5.0"),
        ("~1.2.0", "1.5.0"),
        ("~1", "2.3.4"),
        ("1.2.x", "1.5.0"),
        ("^1.2.3", "2.0.0-rc.1"),
        (">=1.0.0 <1.5.0", "1.5.0"),
        ("<=1.5", "1.5.3"),
        ("<=1.5", "1.6.2"),
        ("<1.5", "1.5.3"),
        (">1.5", "1.6.0"),
        ("^1.0.0 || ^2.0.0", "2.1.0"),
    ],
)
def test__update_requirement__npm_result_admits_target(requirement, target):
    result = update_requirement(requirement, "npm", target)
    assert NpmSpec(result).match(Version(target))


def test__update_requirement__npm_partial_comparators_are_x_ranges():
    assert update_requirement("<=1.5", "npm", "1.5.3") == "<=1.5"
    assert update_requirement("<=1.5", "npm", "1.6.2") == "<1.7"
    assert update_requirement(">1.5", "npm", "1.6.0") == ">1.5"
    with pytest.raises(UnrepresentableUpdate):
        update_requirement(">1.5", "npm", "1.5.3")


def test__update_requirement__pip_drops_unsatisfiable_exclusions():
    assert update_requirement(">=1.0,!=1.5.0,<1.5", "pip", "1.5.0") == ">=1.0,<1.6"
    assert update_requirement("~=1.4.0,!=1.9.0", "pip", "1.9.0") == "~=1.9.0"

    config = UpdaterConfig(drop_unsatisfiable_exclusions=False)
    with pytest.raises(UnrepresentableUpdate):
        update_requirement(">=1.0,!=1.5.0,<1.5", "pip", "1.5.0", config=config)
    with pytest.raises(UnrepresentableUpdate):
        update_requirement("~=1.4.0,!=1.9.0", "pip", "1.9.0", config=config)


def test__update_requirement__pad_precision():
    assert update_requirement("~> 1.4.0", "bundler", "2") == "~> 2.0.0"
    assert update_requirement("~> 1.4.0", "bundler", "2", config=UpdaterConfig(pad_precision=False)) == "~> 2"


def test__update_requirement__prerelease_target():
    assert update_requirement("~> 1.4.0", "bundler", "1.5.0.beta1") == "~> 1.5.0.beta1"
    assert update_requirement("^1.2.3", "npm", "2.0.0-rc.1") == "^2.0.0-rc.1"


def test__update_requirement__widen_ranges():
    widen = RequirementUpdater("pip", UpdateStrategy.WIDEN_RANGES)
    assert widen.update("~=1.4.0", "1.9.3") == ">=1.4,<1.10"
    assert widen.update("~=1.4", "1.9.3") == "~=1.4"
    assert widen.update("==1.4.0", "1.9.3") == "==1.9.3"
    assert widen.update("==1.4.*", "1.9.3") == ">=1.4,<1.10"
    assert widen.update(">=1.0,<1.5", "1.9.3") == ">=1.0,<1.10"
    assert widen.update(">=1.0", "1.9.3") == ">=1.0"

    bundler = RequirementUpdater("bundler", UpdateStrategy.WIDEN_RANGES)
    assert bundler.update("~> 1.4.0", "1.9.3") == ">= 1.4, < 1.10"


def test__update_requirement__passes_through_none():
    assert update_requirement(None, "pip", "1.0.0") is None
    assert update_requirement("~> 1.0", "bundler", None) == "~> 1.0"


def test__update_requirement__preserves_surrounding_whitespace():
    assert update_requirement("  ==1.0.0 ", "pip", "2.0.0") == "  ==2.0.0 "


def test__update_requirement__returns_satisfied_ranges_verbatim():
    text = ">=1.0,   <2.0"
    assert update_requirement(text, "pip", "1.5.0") is text


def test__update_requirement__is_idempotent():
    for ecosystem, requirement, target in [
        ("bundler", "~> 1.4.0", "1.9.0"),
        ("pip", ">1.0.0,<1.5.0", "1.5.0"),
        ("yarn", "^0.x.x-rc1", "1.5.0"),
        ("composer", "1.0.*", "2.3.0"),
    ]:
        once = update_requirement(requirement, ecosystem, target)
        assert update_requirement(once, ecosystem, target) == once


def test__update_requirement__disjunctions():
    assert update_requirement("^1.0.0 || ^2.0.0", "npm", "2.1.0") == "^1.0.0 || ^2.0.0"
    with pytest.raises(UnrepresentableUpdate):
        update_requirement("^1.0.0 || ^2.0.0", "npm", "3.0.0")


def test__update_requirement__errors():
    with pytest.raises(UnrepresentableUpdate):
        update_requirement(">=2.0", "pip", "1.5.0")
    with pytest.raises(MalformedVersion):
        update_requirement("~> 1.0", "bundler", "not a version")
    with pytest.raises(MalformedVersion):
        update_requirement("~> 1.0", "bundler", "1.x")
    with pytest.raises(UnrecognizedConstraint):
        update_requirement("1.0.0", "pip", "2.0.0")


def test__RequirementUpdater__repr():
    assert repr(RequirementUpdater("yarn")) == "RequirementUpdater(ecosystem='javascript', strategy=BUMP)"


def test__RequirementUpdater__current_version_does_not_change_the_result():
    updater = RequirementUpdater("bundler")
    assert updater.update("~> 1.4.0", "1.9.0", current_version="1.4.2") == "~> 1.9.0"
    assert updater.update("~> 1.4.0", "1.9.0", current_version="0.1.0") == "~> 1.9.0"
