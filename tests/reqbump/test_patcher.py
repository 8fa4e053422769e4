import textwrap

import pytest

from reqbump.patcher import find_requirement_refs, replace_requirement

GEMSPEC = textwrap.dedent(
    """
    Gem::Specification.new do |spec|
      spec.name = "example"
      spec.add_runtime_dependency "bundler", "~> 1.0"
      spec.add_dependency("excon", ">= 0.1")
      spec.add_development_dependency "rake"
      spec.add_development_dependency "rspec", "~> 3.0"
    end
    """
)


@pytest.mark.parametrize(
    "content,updated,expected",
    [
        ('gem "business", "~> 1.0", ">= 1.0.1"', "~> 1.5.0", 'gem "business", "~> 1.5.0"'),
        ('gem "business", [">= 1", "<3"], require: true', "~> 1.5.0", 'gem "business", "~> 1.5.0", require: true'),
        ('gem "business", "~> 1.0", ">= 1.0.1"', ">= 1.0, < 3.0", 'gem "business", ">= 1.0", "< 3.0"'),
        ("gem \"business\", '~> 1.0'", "~> 1.5.0", "gem \"business\", '~> 1.5.0'"),
        ('gem "business", %(1.0)', "~> 1.5.0", 'gem "business", %(~> 1.5.0)'),
        ('gem "business", "~>1.0"', "~> 1.5.0", 'gem "business", "~>1.5.0"'),
        ("gem 'business', '1.0.0'", "1.5.0", "gem 'business', '1.5.0'"),
        ('gem "business", ">=1.0"', ">= 1.0, < 3.0", 'gem "business", ">=1.0", "<3.0"'),
        ('gem "business"', "~> 1.5.0", 'gem "business"'),
    ],
)
def test__replace_requirement__gemfile(content, updated, expected):
    assert replace_requirement("Gemfile", content, "business", updated) == expected


def test__replace_requirement__gemfile_multiline_declaration():
    content = (
        'gem "business", "~> 1.0",\n'
        '    git: "https://github.com/gocardless/business"\n'
        'gem "statesman", "~> 1.2.0"\n'
    )
    result = replace_requirement("Gemfile", content, "business", "~> 1.5.0")
    assert 'gem "business", "~> 1.5.0",\n    git: ' in result
    assert 'gem "statesman", "~> 1.2.0"' in result


def test__replace_requirement__gemfile_source_block():
    content = "source 'https://example.com' do\n" '  gem "business", "~> 1.0", require: true\n' "end"
    result = replace_requirement("Gemfile", content, "business", "~> 1.5.0")
    assert result == "source 'https://example.com' do\n" '  gem "business", "~> 1.5.0", require: true\n' "end"


def test__replace_requirement__gemspec():
    result = replace_requirement("example.gemspec", GEMSPEC, "bundler", "~> 1.5.0")
    assert 'time_dependency "bundler", "~> 1.5.0"' in result

    result = replace_requirement("example.gemspec", GEMSPEC, "excon", "~> 1.5.0")
    assert 'add_dependency("excon", "~> 1.5.0")' in result

    assert replace_requirement("example.gemspec", GEMSPEC, "rake", "~> 1.5.0") == GEMSPEC

    result = replace_requirement("example.gemspec", GEMSPEC, "rspec", "~> 1.5.0")
    assert 'ent_dependency "rspec", "~> 1.5.0"\n' in result


def test__replace_requirement__previous_requirement_selects_declarations():
    content = 'group :test do\n  gem "business", "~> 1.0"\nend\ngem "business", "~> 2.0"\n'
    result = replace_requirement("Gemfile", content, "business", "~> 1.5.0", previous_requirement="~>1.0")
    assert result == 'group :test do\n  gem "business", "~> 1.5.0"\nend\ngem "business", "~> 2.0"\n'


def test__find_requirement_refs__requirements_txt():
    content = "Flask==1.0.2\nrequests[security] >= 2.0, < 3.0  # pinned\nrequests-oauthlib==1.0\n"
    refs = find_requirement_refs("requirements.txt", content, "requests")
    assert [ref.value for ref in refs] == [">= 2.0, < 3.0"]
    assert content[refs[0].start : refs[0].end] == ">= 2.0, < 3.0"  # noqa: E203
    assert [ref.value for ref in find_requirement_refs("requirements.txt", content, "flask")] == ["==1.0.2"]


def test__replace_requirement__requirements_txt():
    content = "Flask==1.0.2\nrequests[security] >= 2.0, < 3.0  # pinned\nrequests-oauthlib==1.0\n"
    result = replace_requirement("dev-requirements.txt", content, "requests", ">=2.0,<4.0")
    assert result == "Flask==1.0.2\nrequests[security] >=2.0,<4.0  # pinned\nrequests-oauthlib==1.0\n"

    content = "zope.interface==5.0 --hash=sha256:abcdef\n"
    result = replace_requirement("constraints.txt", content, "zope-interface", "==5.4.0")
    assert result == "zope.interface==5.4.0 --hash=sha256:abcdef\n"


def test__replace_requirement__setup_py():
    content = textwrap.dedent(
        """
        setuptools.setup(
            install_requires=[
                "requests>=2.0,<3.0",
                'flask[async] ~=2.0; python_version >= "3.8"',
            ],
        )
        """
    )
    result = replace_requirement("setup.py", content, "requests", ">=2.0,<4.0")
    assert '"requests>=2.0,<4.0",' in result

    result = replace_requirement("setup.py", content, "Flask", ">=2.0,<4.0")
    assert "'flask[async] >=2.0,<4.0; python_version >= \"3.8\"'," in result
    assert '"requests>=2.0,<3.0",' in result


def test__replace_requirement__json_manifests():
    content = '{\n  "dependencies": {\n    "left-pad": "^1.0.0",\n    "left-pad-extra": "1.0.0"\n  }\n}\n'
    result = replace_requirement("package.json", content, "left-pad", "^1.5.0")
    assert result == '{\n  "dependencies": {\n    "left-pad": "^1.5.0",\n    "left-pad-extra": "1.0.0"\n  }\n}\n'

    content = '{"require": {"monolog/monolog": "~1.0"}}'
    result = replace_requirement("composer.json", content, "monolog/monolog", "~1.5")
    assert result == '{"require": {"monolog/monolog": "~1.5"}}'


def test__replace_requirement__unsupported_file():
    with pytest.raises(ValueError):
        replace_requirement("Cargo.toml", "", "serde", "1.0")
    with pytest.raises(ValueError):
        find_requirement_refs("pom.xml", "", "junit")
