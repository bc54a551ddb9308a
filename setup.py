from setuptools import setup, find_packages

setup(
    name="exactlinalg",
    version="1.0",
    description="Exact linear algebra over the rational numbers",
    long_description=("Exact linear algebra over the rational numbers: linear systems, determinants, inverses, "
                      "rank, row-reduced forms, nullspaces and linear programs without floating point round-off, "
                      "with a batch dispatcher for many independent problems"),
    long_description_content_type="text/plain",
    license="Apache License 2.0",
    python_requires=">=3.8",
    packages=find_packages(include=["exactlinalg", "exactlinalg.*"]),
    install_requires=["numpy", "scipy", "psutil"],
    extras_require={"test": ["pytest", "pytest-timeout", "sympy"]},
    classifiers=[
        "Intended Audience :: Education", "Intended Audience :: Science/Research", "Development Status :: 3 - Alpha",
        "Programming Language :: Python :: 3.9", "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11", "Programming Language :: Python :: 3.12",
        "Natural Language :: English", "Operating System :: OS Independent", "Topic :: Scientific/Engineering :: Mathematics"
    ],
    keywords=["linear algebra", "rational numbers", "exact arithmetic", "gaussian elimination", "simplex"],
    zip_safe=False,
)
