import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    name="pngstruct",
    version="0.0.1",
    description="Chunked file formats for humans",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(exclude=["tests", "tests.*"]),
    scripts=["scripts/pngphys.py"],
    install_requires=[
        'bitstring>=4',
    ],
    extras_require={
        'test': [
            'pytest',
            'pillow',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
