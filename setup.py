
import io
import re
import setuptools

with io.open('src/reqbump/__init__.py', encoding='utf8') as fp:
  version = re.search(r"__version__\s*=\s*['\"](.*)['\"]", fp.read()).group(1)

with io.open('README.md', encoding='utf8') as fp:
  long_description = fp.read()

requirements = ['databind >=4.4.0,<5.0.0', 'packaging >=22.0', 'tomli >=2.0.0,<3.0.0']

setuptools.setup(
  name = 'reqbump',
  version = version,
  author = 'Niklas Rosenstein',
  author_email = 'rosensteinniklas@gmail.com',
  description = 'Updates the version requirements in dependency manifests to admit a new version.',
  long_description = long_description,
  long_description_content_type = 'text/markdown',
  license = 'MIT',
  packages = setuptools.find_packages('src', ['test', 'test.*', 'docs', 'docs.*']),
  package_dir = {'': 'src'},
  include_package_data = False,
  install_requires = requirements,
  extras_require = {
    'test': ['pytest >=7.0.0', 'semantic_version >=2.10.0,<3.0.0'],
  },
  tests_require = [],
  python_requires = '>=3.9',
  data_files = [],
)
