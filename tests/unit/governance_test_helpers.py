from enum import Enum


def resource_governance_doc_url(resource: str) -> str:
    governance_doc_url = f"https://typesense-internal-docs/{resource}-governance"
    return governance_doc_url


class AWSService(str, Enum):
    EC2 = "ec2"
    Secrets_Manager = "secrets-manager"
    CloudFormation_Outputs = "cloudformation-outputs"
