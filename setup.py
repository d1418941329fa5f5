"""Install the account authentication core."""

from setuptools import setup, find_packages

setup(
    name='authcore',
    version='0.1.0',
    packages=find_packages(include=['authcore', 'authcore.*'],
                           exclude=['*tests*']),
    python_requires='>=3.8',
    install_requires=[
        "pyjwt>=2",
        "sqlalchemy>=2",
        "pytz",
        "click",
        "python-json-logger<3",
    ],
    extras_require={
        "test": [
            "pytest",
            "hypothesis",
            "mimesis",
        ],
    },
    entry_points={
        'console_scripts': [
            'authcore-token=authcore.generate_token:generate_token',
        ],
    },
    zip_safe=False
)
