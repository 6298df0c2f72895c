"""cyspec: analyze a front-end repository and generate Cypress spec skeletons."""

__version__ = "1.0.0"
