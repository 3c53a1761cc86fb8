"""Python setup.py for accessibility_tester package"""
import io
import os
from setuptools import find_packages, setup


def read(*paths, **kwargs):
    """Read the contents of a text file safely.
    >>> read("accessibility_tester", "VERSION")
    '0.1.1'
    >>> read("README.md")
    ...
    """

    content = ""
    with io.open(
        os.path.join(os.path.dirname(__file__), *paths),
        encoding=kwargs.get("encoding", "utf8"),
    ) as open_file:
        content = open_file.read().strip()
    return content


def read_requirements(path):
    return [
        line.strip()
        for line in read(path).split("\n")
        if line.strip() and not line.startswith(('"', "#", "-", "git+"))
    ]


setup(
    name="accessibility-tester",
    version=read("accessibility_tester", "VERSION"),
    description="MCP server that audits web pages for WCAG accessibility with Playwright and axe-core",
    long_description=read("README.md"),
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*", ".github"]),
    package_data={"accessibility_tester": ["VERSION"]},
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=read_requirements("requirements.txt"),
    entry_points={
        "console_scripts": ["accessibility-tester = accessibility_tester.__main__:main"]
    },
    extras_require={"test": read_requirements("requirements-test.txt")},
)
