from setuptools import setup, find_packages
from pathlib import Path

this_dir = Path(__file__).parent
readme = (this_dir / "README.md").read_text(encoding="utf-8")

setup(
    name="wine-quality-eda",
    version="1.0.0",
    description="Exploratory data analysis report for white wine quality (derived features, statistics, charts, RF + linear models)",
    long_description=readme,
    long_description_content_type="text/markdown",
    author="Wine Quality EDA maintainers",
    python_requires=">=3.9",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    include_package_data=True,
    package_data={"wine_eda.reporting": ["templates/*.j2"]},
    install_requires=[
        "numpy>=1.26",
        "pandas>=2.0",
        "scikit-learn>=1.3",
        "scipy>=1.11",
        "matplotlib>=3.8",
        "seaborn>=0.13",
        "jinja2>=3.1",
        "joblib>=1.3",
        "pyyaml>=6.0",
    ],
    extras_require={
        "test": ["pytest>=7.4"],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Information Analysis",
    ],
)
