from setuptools import setup, find_packages
import spvtrace


with open('readme.rst') as f:
    long_description = f.read()


setup(
    name='spvtrace',
    description="Basic block execution counters for SPIR-V modules implemented in pure Python",
    long_description=long_description,
    version=spvtrace.__version__,
    include_package_data=True,
    packages=find_packages(exclude=["*.test.*", "test"]),
    package_data={'': ["*.rst"]},
    python_requires='>=3.6',
    extras_require={
        'test': ['pytest', 'hypothesis'],
    },
    license='BSD',
    classifiers=[
        'License :: OSI Approved :: BSD License',
        'Development Status :: 3 - Alpha',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: Implementation :: CPython',
        'Programming Language :: Python :: Implementation :: PyPy',
        'Topic :: Software Development :: Compilers',
        'Topic :: Software Development :: Testing',
    ]
)
