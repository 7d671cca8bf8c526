from setuptools import find_packages, setup

with open("README.md", encoding="utf-8") as readme_file:
    long_description = readme_file.read()

setup(
    name="pcaviz",
    version="0.1.0",
    description="Principal Component Analysis of labeled tabular data with scatter plots",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "numpy>=1.20.0",
        "pandas>=2.0.0,<3.0.0",
        "matplotlib>=3.5.0,<4.0.0",
        "scikit-learn>=1.0.0,<2.0.0",
        "scipy>=1.7.0,<2.0.0",
        "seaborn>=0.12.0,<1.0.0",
        "pyyaml>=6.0",
        "jsonschema>=4.0.0,<5.0.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Information Analysis",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.9",
    entry_points={
        "console_scripts": [
            "pcaviz-reduce=pcaviz.cli:main",
        ],
    },
)
