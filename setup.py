import setuptools
from setuptools import find_packages

with open("readme.md", "r") as fh:
    long_description = fh.read()


vars2find = ["__author__", "__version__"]
vars2readme = {}
with open("./autobackup/__init__.py") as f:
    for line in f.readlines():
        for v in vars2find:
            if line.startswith(v):
                line = line.replace(" ", "").replace('"', "").replace("'", "").strip()
                vars2readme[v] = line.split("=")[1]

core_deps = [
    "pydantic>=2.0",
    "aiofiles>=23.1",
    "redis[hiredis]>=5.0.0",
]

api_deps = [
    "fastapi>=0.100",
    "pydantic-settings>=2.0",
    "python-multipart",
    "uvicorn",
]

test_deps = [
    "pytest",
    "pytest-asyncio",
    "httpx",
]

setuptools.setup(
    name="autobackup",
    version=vars2readme["__version__"],
    author=vars2readme["__author__"],
    description="Automatic backup engine with pluggable storage and retention",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.9",
    install_requires=core_deps + api_deps,
    extras_require={
        "test": test_deps,
        "all": test_deps,
    },
)
