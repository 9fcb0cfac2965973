from setuptools import setup, find_packages
import pathlib

# Detect layout
use_src = pathlib.Path("src/jobarray").exists()
pkg_args = {"package_dir": {"": "src"}, "packages": find_packages(where="src")} if use_src \
           else {"packages": find_packages(where=".")}

setup(
    name="jobarray-tools",
    version="0.1.0",
    include_package_data=True,
    package_data={"jobarray.slurm": ["templates/*.j2"]},
    python_requires=">=3.8",
    install_requires=[
        "typer",
        "jinja2",
        "pyyaml",
    ],
    extras_require={"test": ["pytest"]},
    entry_points={"console_scripts": ["jobarray=jobarray.cli:main"]},
    **pkg_args
)
