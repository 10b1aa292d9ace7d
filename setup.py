from setuptools import setup, find_packages
setup(
    name='keyenv',
    version='0.1.0',
    package_dir={'': 'src'},
    packages=find_packages(where='src'),
    python_requires='>=3.8',
    description='Python client for the KeyEnv secrets management API.',
    author='KeyEnv',
    install_requires=[
        'requests>=2.25.0',
        'pydantic>=2.0.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.0.0',
            'fastapi>=0.100.0',
            'httpx>=0.24.0',
        ],
    },
)
