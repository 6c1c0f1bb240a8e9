from setuptools import setup

with open("hilink/version.py") as f:
    exec(f.read())

setup(
    name="python-hilink",
    version=__version__,  # type: ignore # noqa: F821
    description="Python API for the web management interface of Huawei HiLink devices",
    url="https://github.com/python-hilink/python-hilink",
    author="",
    author_email="",
    license="GPLv3",
    packages=["hilink"],
    install_requires=[
        "aiohttp>=3",
        "asyncclick>=8.1.7",
        "mashumaro>=3.11",
        "orjson>=3.9",
        "rich",
        "yarl",
    ],
    extras_require={
        "test": ["pytest", "pytest-asyncio", "pytest-mock"],
    },
    python_requires=">=3.11",
    entry_points={"console_scripts": ["hilink=hilink.cli:cli"]},
    zip_safe=False,
)
