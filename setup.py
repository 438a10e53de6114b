import itertools
import os

from setuptools import find_packages, setup

# https://packaging.python.org/single_source_version/
base_dir = os.path.abspath(os.path.dirname(__file__))
about = {}
with open(os.path.join(base_dir, "xdmfio", "__about__.py"), "rb") as f:
    exec(f.read(), about)


extras = {
    "hdf5": ["h5py"],  # Hdf5SingleFile, Hdf5MultipleFiles data storage
}
extras["all"] = list(set(itertools.chain.from_iterable(extras.values())))
extras["test"] = ["pytest", "h5py"]


setup(
    name="xdmfio",
    version=about["__version__"],
    author=about["__original_author__"],
    author_email=about["__original_author_email__"],
    packages=find_packages(include=["xdmfio", "xdmfio.*"]),
    description="Writing time series of simulation results to XDMF",
    long_description=open(os.path.join(base_dir, "README.md")).read(),
    long_description_content_type="text/markdown",
    url=about["__website__"],
    project_urls={
        "Code": about["__website__"],
        "Issue tracker": about["__website__"] + "/issues",
    },
    license=about["__license__"],
    platforms="any",
    install_requires=["numpy", "rich"],
    python_requires=">=3.8",
    extras_require=extras,
    classifiers=[
        about["__status__"],
        about["__license__"],
        "Intended Audience :: Science/Research",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Topic :: Scientific/Engineering",
    ],
)
