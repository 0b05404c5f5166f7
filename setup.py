#!/usr/bin/env python


from setuptools import setup, find_packages


setup(
    name="tenx_sv",
    version="1.0.0",
    description="Normalize single-sample 10x Long Ranger SV VCFs into breakend-pair records",
    package_dir={"": "src"},
    packages=find_packages("src"),
    entry_points={
        "console_scripts": [
            "normalize-tenx-sv-vcf=tenx_sv.normalize_tenx_sv_vcf:main",
        ]
    },
    python_requires=">3.8",
    install_requires=[
        "pysam>=0.23.3",
        "tqdm",
    ],
    extras_require={
        "tests": ["pytest", "pytest-cov"]
    },
    include_package_data=True,
    zip_safe=False
)
