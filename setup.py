from setuptools import setup, find_packages

setup(
    name='stash',
    packages=find_packages("src"),
    package_dir={"": "src"},
    version='0.1',
    description='Stash stdin away under a name and get it back later',
    keywords=['cli', 'stash', 'clipboard', 'pipes', 'shell'],
    classifiers=['Development Status :: 3 - Alpha',
                 'Environment :: Console',
                 'Intended Audience :: Developers',
                 'Topic :: Utilities',
                 'Programming Language :: Python :: 3'],
    python_requires='>=3.9',
    install_requires=['docopt', 'rich'],
    extras_require={
        "test": ['pytest'],
    },
    entry_points={
        "console_scripts": ['stash = stash.stash:run_stash']
    }
)
