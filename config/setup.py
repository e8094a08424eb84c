from setuptools import setup, find_packages
import os

# Get the parent directory (repository root)
here = os.path.dirname(os.path.abspath(__file__))
repo_root = os.path.dirname(here)

# Read README from parent directory
readme_path = os.path.join(repo_root, "README.md")
with open(readme_path, "r", encoding="utf-8") as fh:
    long_description = fh.read()

# Read requirements from current directory (config/)
with open(os.path.join(here, "requirements.txt"), "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

setup(
    name="webget",
    version="1.0.0",
    description="A non-interactive network retriever",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(where=repo_root, exclude=["tests", "tests.*"]),
    package_dir={"": repo_root},
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Topic :: Internet :: WWW/HTTP",
        "License :: OSI Approved :: GNU General Public License v3 (GPLv3)",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
    python_requires=">=3.9",
    install_requires=requirements,
    extras_require={"test": ["pytest>=7.0"]},
    entry_points={
        "console_scripts": [
            "webget=webget.cli:main",
        ],
    },
)
