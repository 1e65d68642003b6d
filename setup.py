import setuptools

setuptools.setup(
    name="time_keeper_e2e",
    version="0.1.0",
    description="Browser-driven end-to-end tests for the Time Keeper multi-timezone clock page.",
    packages=setuptools.find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "playwright>=1.49",
        "faker",
        "tzdata; sys_platform == 'win32'",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "playwright>=1.49",
            "pytest-playwright>=0.6",
            "pytest-timeout>=2.3",
            "flask",
        ],
    },
)
