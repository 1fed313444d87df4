from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="pattern-backtester",
    version="1.0.0",
    author="Pattern Backtester Team",
    description="Confidence scoring, trade simulation and performance analytics for chart patterns",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["pattern_backtester", "pattern_backtester.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Financial and Insurance Industry",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Office/Business :: Financial :: Investment",
    ],
    python_requires=">=3.9",
    install_requires=[
        "pandas>=1.3.0",
        "numpy>=1.21.0",
    ],
    extras_require={
        "dev": [
            "pytest>=6.0",
            "pytest-cov",
            "black",
            "flake8",
            "mypy",
        ],
        "jupyter": [
            "jupyter",
            "matplotlib",
            "seaborn",
        ],
    },
    entry_points={
        "console_scripts": [
            "pattern-backtester=pattern_backtester.examples.basic_demo:comprehensive_demo",
        ],
    },
)
