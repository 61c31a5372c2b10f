[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dbmlmigrate"
version = "0.8.0"
description = "Generate SeaORM migration files from DBML database diagrams"
requires-python = ">=3.11"
dependencies = [
    "jinja2",
]
keywords = ["dbml", "migration", "sea-orm", "postgresql", "code generation", "schema"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database",
    "Topic :: Software Development :: Code Generators",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
dbmlmigrate = "dbmlmigrate.app:main"

[tool.hatch.build.targets.wheel]
packages = ["dbmlmigrate"]

[tool.pytest.ini_options]
addopts = "-ra"
