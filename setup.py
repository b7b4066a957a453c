from pathlib import Path
from setuptools import setup, find_packages

# Read README for long description
readme_path = Path(__file__).parent / "README.md"
long_description = ""
if readme_path.exists():
    long_description = readme_path.read_text(encoding="utf-8")

setup(
    name='conn-str',
    version='0.2.0',
    description='Parse and encode ADO.NET and ODBC database connection strings',
    long_description=long_description,
    long_description_content_type='text/markdown',
    author='Microsoft Corporation',
    packages=find_packages(include=['conn_str', 'conn_str.*']),
    # Requires >= Python 3.10
    python_requires='>=3.10',
    install_requires=[
        'typer>=0.9.0',
        'rich>=13.0.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'conn-str=conn_str.cli:main',
        ],
    },
    classifiers=[
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Topic :: Database',
    ],
    zip_safe=False,
)
