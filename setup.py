from setuptools import find_packages, setup

with open("README.md", "r") as fh:
    long_description = fh.read()

setup(
    name='solc-cli',
    packages=find_packages(include=['solc_cli']),
    version='0.1.0',
    description='Command line front end for the Solidity compiler with base and include path import resolution',
    long_description=long_description,
    long_description_content_type="text/markdown",
    author='SBIP',
    license='MIT',
    python_requires='>=3.8',
    install_requires=['addict>=2.4.0',
                      'py_solc_x>=1.1.1',
                      'semantic_version>=2.9.0',
                      'z3-solver>=4.8.0'],
    extras_require={'test': ['pytest>=4.4.1']},
    entry_points={
        'console_scripts': ['solcpy=solc_cli.cli:main'],
    },
    setup_requires=['pytest-runner'],
    tests_require=['pytest>=4.4.1'],
    test_suite='tests',
)
