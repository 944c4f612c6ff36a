from setuptools import setup, find_packages

with open("README-py.md", "r") as fh:
    long_description = fh.read()
with open("semver.txt", "r") as fh:
    semver = fh.read().strip()

setup(
    name='railroad-grammar',
    version=semver,
    description='Lay out railroad syntax diagrams for grammar rules and terminals, and render them to SVG.',
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    python_requires='>=3.8',
    extras_require={
        'test': ['pytest'],
    },
    keywords=['diagrams', 'syntax', 'grammar', 'railroad diagrams', 'antlr'],
    classifiers=[
        'License :: CC0 1.0 Universal (CC0 1.0) Public Domain Dedication',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3 :: Only',
    ],
)
