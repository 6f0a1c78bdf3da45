from setuptools import setup, find_packages

setup(
    name="vocabDocs",
    version="0.3.0",
    description="Documentation corpus generator for schema.org and its extensions",
    author="Your Name",
    author_email="you@example.com",
    packages=find_packages(include=["vocabDocs", "vocabDocs.*", "api_clients", "api_clients.*"]),
    python_requires=">=3.10",
    install_requires=[
        "click>=8.0",
        "requests>=2.31.0",
        "tenacity>=8.2",
        "rdflib>=6.3",
        "PyYAML>=6.0",
        "tabulate>=0.8.9",
        "beautifulsoup4>=4.12",
    ],
    extras_require={
        "test": ["pytest>=7.4", "pytest-socket>=0.6"],
    },
    entry_points={
        "console_scripts": ["vocabDocs=vocabDocs.cli.__main__:main"],
    },
    license="MIT",
)
