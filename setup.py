from setuptools import setup, find_packages

setup(
    name="polyhedron-canonicalization",
    version="0.1.0",
    description="Iterative canonicalization of polyhedra: tangent edges, planar faces, centred on the origin",
    author="",
    packages=find_packages(exclude=["tests"]),
    py_modules=["canonicalize_polyhedron"],
    include_package_data=True,
    python_requires=">=3.9",
    install_requires=[
        "numpy",
        "trimesh",
        "tqdm",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "canonicalize-polyhedron=canonicalize_polyhedron:main",
        ],
    },
)
