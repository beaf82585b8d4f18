from setuptools import setup, find_packages

setup(
    name='quatrot',
    version='0.1.0',
    packages=find_packages(exclude=['tests']),
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    python_requires='>=3.8',
    install_requires=[
        'numpy',
        'pandas',
        'pydantic>=2',
        'omegaconf',
        'PyYAML',
    ],
    extras_require={
        'test': [
            'pytest',
            'scipy',
        ],
    },
)
