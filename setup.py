import setuptools

setuptools.setup(
    name="horn_beamline",
    description="Magnetic horn and dipole chicane field models for secondary beamline simulations",
    url="https://github.com/",
    packages=setuptools.find_packages(exclude=["tests", "tests.*"]),
    install_requires=["numpy", "scipy", "joblib", "numba"],
    extras_require={"test": ["pytest"]},
    python_requires=">=3.9",
    version="0.1",
)
