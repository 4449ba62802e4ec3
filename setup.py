from setuptools import setup, find_namespace_packages

setup(
    name='atmfjstc-device-tree-fs',
    version='0.1.0',

    author_email='atmfjstc@protonmail.com',

    package_dir={'': 'src'},
    packages=find_namespace_packages(where='src', include=['atmfjstc.*']),

    install_requires=[
        'termcolor>=1, <4',
        'colorama>=0.4.0, <2',
    ],

    entry_points={
        'console_scripts': [
            'dtfs-tree=atmfjstc.lib.device_tree_fs.dtfs_tree:main',
        ],
    },

    zip_safe=True,

    description="Parser for device trees exposed as a filesystem (e.g. /proc/device-tree)",

    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Environment :: Console",
        "Typing :: Typed",
    ],
    python_requires='>=3.7',
)
