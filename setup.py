"""Setuptools configuration for the message board."""

from setuptools import find_packages, setup


setup(
    name="message-board",
    version="0.1.0",
    description="Append-only message board served as JSON and HTML by Flask",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    py_modules=[
        "assets",
        "db_config",
        "message_store",
        "run",
    ],
    package_data={"board": ["templates/*.html", "templates/messages/*.html"]},
    python_requires=">=3.10",
    install_requires=[
        "flask>=3.0",
        "markupsafe>=2.1",
        "psycopg[binary]>=3.1",
    ],
    extras_require={
        "test": ["pytest>=7.0", "beautifulsoup4>=4.12", "werkzeug>=3.0"],
        "docs": ["sphinx>=7.0"],
    },
)
