from setuptools import find_packages, setup

setup(
    name="composite-criteria",
    version="0.1.0",
    description="Composite material failure criteria over stress tensor histories",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.9",
    install_requires=[
        "numpy>=1.22",
        "polars>=0.20.5",
        "pyyaml>=6.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "composite-criteria=composite_criteria.cli.run_criteria:main",
        ],
    },
)
