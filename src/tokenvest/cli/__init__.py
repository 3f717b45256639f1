"""TokenVest command line interface."""
