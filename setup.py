from setuptools import setup, find_packages


# Requirements
with open("gbloch/version.py") as version_file:
    exec(version_file.read())

setup(
    name="gbloch",
    version=__version__,
    packages=find_packages(include=["gbloch", "gbloch.*"]),
    python_requires=">=3.7",
    install_requires=["numpy", "scipy"],
    extras_require={
        "examples": ["click", "matplotlib"],
        "test": "pytest",
    },
    # metadata for upload to PyPI
    description="Precision and bias of quantitative MRI mapping under a generalized Bloch two-pool model",
    license="",
    # url=,
)
