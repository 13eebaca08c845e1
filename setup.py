from setuptools import setup, find_packages

setup(
    name="readmission-analytics",
    version="1.0.0",
    packages=find_packages(exclude=("tests", "tests.*")),
    install_requires=[
        "pandas>=2.0",
        "numpy>=1.24",
        "matplotlib>=3.7",
        "seaborn>=0.12",
        "PyYAML>=6.0",
        "psutil>=5.9",
        "openpyxl>=3.1",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    entry_points={
        "console_scripts": [
            "readmission=readmission.cli:main",
        ],
    },
    python_requires=">=3.8",
    description="Per-patient hospital readmission interval analytics",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Healthcare Industry",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ]
)
