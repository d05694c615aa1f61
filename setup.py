"""
setup.py for face-trainer.

The package lives under backend/src/face_trainer/, so package_dir maps it
explicitly.
"""

from setuptools import setup

setup(
    name="face-trainer",
    version="0.1.0",
    description="Per-tenant face cache, classifier lifecycle and prediction runtime",
    python_requires=">=3.9",
    package_dir={
        "face_trainer": "backend/src/face_trainer",
    },
    packages=[
        "face_trainer",
        "face_trainer.classifier",
        "face_trainer.cli",
        "face_trainer.storage",
    ],
    install_requires=[
        "numpy>=1.24",
        "scikit-learn>=1.3",
        "faiss-cpu>=1.7.4",
        "SQLAlchemy>=2.0",
        "click>=8.1",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "face-trainer=face_trainer.cli.main:cli",
        ],
    },
)
