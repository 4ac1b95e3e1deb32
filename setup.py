from setuptools import find_packages, setup

setup(
    name='rfxbridge',
    version='1.0.0',
    description='Bridge controller for RFXCOM 433 MHz transceivers (serial, FTDI and TCP links)',
    author='isantolin',
    author_email='',
    packages=find_packages(include=['rfxbridge', 'rfxbridge.*']),
    python_requires='>=3.11',
    install_requires=[
        'construct',
        'marshmallow>=3.13',
        'msgspec',
        'pyserial',
        'tenacity>=8.2',
        'transitions',
    ],
    extras_require={
        # D2XX transport for automatically discovered USB bridges.
        'ftdi': ['ftd2xx'],
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'rfxbridge=rfxbridge.daemon:main',
        ],
    },
    classifiers=[
        'Programming Language :: Python :: 3',
        'Operating System :: POSIX :: Linux',
    ],
)
