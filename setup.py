from setuptools import find_packages, setup

package_name = "gicp_reg"

setup(
    name=package_name,
    version="0.1.0",
    packages=find_packages(exclude=["test", "test.*"]),
    python_requires=">=3.9",
    install_requires=["setuptools", "numpy", "scipy", "pydantic>=2", "pyyaml"],
    extras_require={
        "test": ["pytest"],
    },
    zip_safe=True,
    description="Generalized-ICP point cloud registration (Gauss-Newton / Levenberg-Marquardt on SE(3))",
    license="Apache-2.0",
)
