from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="wiki-user-table-populator",
    version="1.2.0",
    description="Populates a wiki user table with stub users built from the user columns of other tables",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
        "Development Status :: 4 - Beta",
        "Intended Audience :: System Administrators",
        "Topic :: Database",
    ],
    python_requires=">=3.8",
    install_requires=[
        "SQLAlchemy>=2.0.0",
        "pandas>=2.0.0",
        "python-dotenv>=0.15.0",
    ],
    extras_require={
        "postgres": [
            "psycopg2-binary>=2.9.0",
        ],
        "test": [
            "pytest>=7.0.0",
        ],
        "all": [
            "psycopg2-binary>=2.9.0",
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "populate-user-table=scripts.database.populate_user_table:main",
        ],
    },
)
