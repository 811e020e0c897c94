from pathlib import Path
from setuptools import find_packages, setup

ROOT = Path(__file__).parent


def _read_version() -> str:
    """Read __version__ from src/ifdef/__init__.py without importing the package."""
    for line in (ROOT / "src" / "ifdef" / "__init__.py").read_text(encoding="utf-8").splitlines():
        if line.startswith("__version__"):
            return line.split("=", 1)[1].strip().strip("'\"")
    raise RuntimeError("__version__ not found in src/ifdef/__init__.py")


setup(
    name="ifdef-preprocessor",
    version=_read_version(),
    description="Conditional-compilation preprocessor for ///#if directive comments",
    author="GAHEOS",
    python_requires=">=3.9",
    package_dir={"": "src"},
    packages=find_packages(where="src", include=["ifdef", "ifdef.*"]),
    install_requires=[],
    extras_require={"test": ["pytest>=7"]},
    entry_points={"console_scripts": ["ifdef = ifdef.cli:main"]},
)
