from setuptools import setup, find_packages

setup(
    name="a11yaudit",
    version="1.0.0",
    description="Accessibility audits for live web pages (Playwright + axe-core)",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "playwright",
        "requests",
        "pyyaml",
        "colorama",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "a11yaudit=a11yaudit.cli:run",
        ],
    },
    python_requires=">=3.9",
)
