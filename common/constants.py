from aws_cdk import aws_ec2 as ec2

# Naming convention components
SERVICE_NAME = "typesense"  # The application name
LOG_SERVICE_NAME = "typesense-infra"  # Powertools logger service

# Environment sourcing
ENVIRONMENT_CONTEXT_KEY = "environment"
ENVIRONMENT_VARIABLE = "CDK_DEFAULT_ENVIRONMENT"

# Container
TYPESENSE_IMAGE = "typesense/typesense:26.0"
TYPESENSE_CONTAINER_NAME = "typesense"
TYPESENSE_PORT = 8108
TYPESENSE_DATA_DIR = "/data"
TYPESENSE_COMMAND = ["--data-dir", TYPESENSE_DATA_DIR, "--enable-cors"]
TYPESENSE_API_KEY_ENV = "TYPESENSE_API_KEY"
HEALTH_CHECK_PATH = "/health"
LOG_STREAM_PREFIX = "typesense"

# Credential
API_KEY_FIELD = "apiKey"
API_KEY_LENGTH = 64
# Everything outside [0-9a-f] once uppercase and punctuation are excluded
NON_HEX_CHARACTERS = "ghijklmnopqrstuvwxyz"

# Persistent instance
INSTANCE_CLASS = ec2.InstanceClass.T3
INSTANCE_SIZE = ec2.InstanceSize.MICRO
INSTANCE_ROLE_POLICY = "service-role/AmazonEC2ContainerServiceforEC2Role"
PERSISTENT_CPU_UNITS = 512
PERSISTENT_MEMORY_MIB = 900  # t3.micro has 1GB, leave room for the OS and ECS agent
PUBLIC_API_INGRESS_DESCRIPTION = (
    f"typesense-public-api: allow Typesense API (TCP/{TYPESENSE_PORT}) "
    "from any IPv4 address (non-production policy)"
)
INSTANCE_PUBLIC_IP_PATH = "Reservations.0.Instances.0.PublicIpAddress"

# Elastic
ELASTIC_DESIRED_COUNT = 2
ELASTIC_MAX_COUNT = 4
ELASTIC_CPU_UNITS = 512
ELASTIC_MEMORY_MIB = 1024
HEALTH_CHECK_INTERVAL_SECONDS = 30
SCALE_ON_CPU_PERCENT = 70
# CfnOutputs ApplicationLoadBalancedFargateService adds under its own scope
LOAD_BALANCED_PATTERN_OUTPUTS = ("LoadBalancerDNS", "ServiceURL")

# Network
VPC_MAX_AZS = 2
CIDR_MASK = 24
ANY_IPV4_CIDR = "0.0.0.0/0"

# Output contract keys
OUTPUT_API_URL = "api-url"
OUTPUT_API_KEY_SECRET_ARN = "api-key-secret-arn"
OUTPUT_CLUSTER_NAME = "cluster-name"
OUTPUT_SERVICE_NAME = "service-name"
