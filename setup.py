from setuptools import setup, find_packages

setup(
    name="ampextract",
    version="0.1.0",
    description="In-silico PCR amplicon extraction for metabarcoding reference databases",
    author="Your Name",
    author_email="your.email@example.com",
    url="https://github.com/yourusername/ampExtract",
    packages=find_packages(include=["ampextract", "ampextract.*"]),
    install_requires=[
        "biopython>=1.80",
        "pandas",
        "numpy>=1.20",
        "tqdm",
        "colorama",
        "openpyxl"
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'ampextract=ampextract.pipeline:main',
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Bio-Informatics",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
    ],
    python_requires=">=3.9",
)
