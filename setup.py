from setuptools import setup, find_packages

setup(
    name="aws_utils",
    version="0.1.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "boto3>=1.26.0",
        "docker>=6.1.0",
        "requests>=2.26.0",
    ],
    python_requires=">=3.8",
    entry_points={
        "console_scripts": [
            "aws-utils=aws_utils.cli:main",
        ],
    },
    description="Resolve AWS profile credentials, fetch ECR login tokens, publish images to ECR and update Lambda functions",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-mock>=3.10.0",
            "moto>=5.0.0",
        ],
    },
)
