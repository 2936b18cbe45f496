"""
Setup configuration for the AVA Orchestrator package
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="ava-orchestrator",
    version="1.0.0",
    author="Your Name",
    author_email="your.email@example.com",
    description="Multi-agent task orchestration core for a crypto-portfolio assistant",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/yourusername/ava-orchestrator",
    packages=find_packages(include=["ava_orchestrator", "ava_orchestrator.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Libraries",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.11",
    install_requires=[
        "langchain-core>=0.3.0",
        "langchain-anthropic>=0.2.0",
        "python-dotenv>=1.0.0",
        "redis>=5.0.0",
        "pydantic>=2.0",
        "httpx>=0.27.0",
    ],
    extras_require={
        "openai": ["langchain-openai>=0.2.0"],
        "google": ["langchain-google-genai>=2.0.0"],
        "groq": ["langchain-groq>=0.2.0"],
        "local": ["langchain-community>=0.3.0"],
        "all": [
            "langchain-openai>=0.2.0",
            "langchain-google-genai>=2.0.0",
            "langchain-groq>=0.2.0",
            "langchain-community>=0.3.0",
        ],
        "dev": [
            "pytest>=7.0",
            "pytest-asyncio>=0.23",
            "pytest-cov>=4.0",
            "black>=23.0",
            "flake8>=6.0",
            "mypy>=1.0",
        ],
    },
)
