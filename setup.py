from setuptools import find_packages, setup

package_name = "manifold_kf"

setup(
    name=package_name,
    version="0.1.0",
    packages=find_packages(exclude=["test"]),
    data_files=[
        (
            "share/" + package_name + "/config",
            [
                "config/manifold_kf_base.yaml",
            ],
        ),
        (
            "share/" + package_name + "/config/presets",
            [
                "config/presets/planar.yaml",
                "config/presets/spatial_accel.yaml",
            ],
        ),
    ],
    install_requires=["setuptools", "numpy", "scipy", "pyyaml", "pydantic>=2"],
    extras_require={"test": ["pytest"]},
    zip_safe=True,
    maintainer="you",
    maintainer_email="you@example.com",
    description="Kalman filtering of SE(2)/SE(3) poses and their derivatives on Lie groups",
    license="Apache-2.0",
    tests_require=["pytest"],
)
