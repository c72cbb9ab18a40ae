from setuptools import setup, find_packages

setup(
    name="py-load-client",
    version="0.1.0",
    packages=find_packages(include=['loadclient', 'loadclient.*']),
    install_requires=[
        'pyyaml>=5.1',
        'pydantic>=2.0',
        'hdrhistogram>=0.10.3',
        'click>=8.0',
        'rich>=12.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'load-client=loadclient.cli:main',
        ],
    },
    python_requires='>=3.8',
)
