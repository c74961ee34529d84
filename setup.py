from setuptools import setup

setup(
    name='atmfjstc-blob-decode',
    version='1.0.0',

    author_email='atmfjstc@protonmail.com',

    package_dir={'': 'src'},
    packages=['atmfjstc.lib.blob_decode'],

    install_requires=[
    ],

    zip_safe=True,

    description="Declarative, incremental decoding of binary blobs from C struct-like specs",

    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Typing :: Typed",
    ],
    python_requires='>=3.7',
)
