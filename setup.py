"""Setup configuration for activity_report"""

from setuptools import setup, find_packages

setup(
    name="org-member-activity-report",
    version="0.1.0",
    description=(
        "CLI tool that reports GitHub organization member contributions as CSV "
        "and commits the report to a repository."
    ),
    author="Org Member Activity Report Contributors",
    author_email="",
    python_requires=">=3.10",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "requests>=2.28.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "black>=22.0",
            "flake8>=4.0",
            "mypy>=0.950",
        ],
    },
    entry_points={
        "console_scripts": [
            "activity-report=activity_report.main:main",
        ],
    },
)
