"""Application services for cfncli.

Services talk to CloudFormation and drive deployments, coordinating between
the stack domain (stack/) and the boto3 client.
"""

from cfncli.services.cloudformation import ApiError, CloudFormationApi, make_client
from cfncli.services.deployer import DeploymentClient

__all__ = [
    "ApiError",
    "CloudFormationApi",
    "DeploymentClient",
    "make_client",
]
