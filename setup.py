# setup.py
from setuptools import setup, find_packages

# Version is defined here to avoid import issues during build
__version__ = "1.0.0"

setup(
    name='git-helper',
    version=__version__,
    description='Convenience commands around git: stage-commit-push, pull-request merges, branch checkout-or-create, rollbacks.',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    packages=find_packages(exclude=['tests', 'tests.*']),
    include_package_data=True,
    install_requires=[
        'click>=8.1.0',
        'rich>=13.0.0',
        'PyYAML>=6.0',
        'pydantic>=2.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'git-helper = githelper.cli:cli',
            'git-commit = githelper.cli:stage_commit',
            'git-push = githelper.cli:stage_commit_push',
            'git-stash = githelper.cli:stash',
            'git-merge = githelper.cli:merge',
            'git-pull-request = githelper.cli:pull_request',
            'git-branch = githelper.cli:branch_checkout_or_create',
            'git-reset = githelper.cli:reset',
            'git-merge-force = githelper.cli:merge_force',
            'git-rollback = githelper.cli:rollback',
            'git-log = githelper.cli:log',
            'git-help = githelper.cli:help_command',
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Operating System :: OS Independent",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Version Control :: Git",
        "Topic :: Utilities",
    ],
    python_requires='>=3.10',
    keywords='git, cli, workflow, merge, rollback',
)
