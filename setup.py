# #!/usr/bin/env python

"""setup.py script for py_ballistictk library"""

from setuptools import setup, find_packages

setup(
    name='py_ballistictk',
    version='0.1.0',
    description='Spin-stabilized projectile flight simulation and aerodynamic coefficient calibration',
    license='LGPL-3.0-only',
    python_requires='>=3.10',
    packages=find_packages(include=['py_ballistictk', 'py_ballistictk.*']),
    install_requires=[
        'typing_extensions>=4.12.2',
        'tomli>=2.0.0; python_version<"3.11"',
    ],
    extras_require={
        'charts': [
            'matplotlib',
            'pandas',
        ],
        'test': [
            'pytest',
        ],
    },
    entry_points={
        'console_scripts': [
            'btk-fit = py_ballistictk.__main__:main',
        ],
    },
)
