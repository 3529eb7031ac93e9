"""tfgate — validation gate for Terraform projects."""

__version__ = "0.1.0"
