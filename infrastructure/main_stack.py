"""
Main CDK Stack for the Banking Intelligence backend.
"""

from aws_cdk import (
    Stack,
    Tags,
    CfnOutput,
    aws_iam as iam,
)
from constructs import Construct

from infrastructure.constructs.api_layer import ApiLayerConstruct
from infrastructure.constructs.auth_layer import AuthLayerConstruct
from infrastructure.constructs.data_layer import DataLayerConstruct
from infrastructure.config.settings import Settings


class BankingIntelStack(Stack):
    """Main stack wiring all constructs together."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        settings: Settings,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        # Global tags for cost/accounting.
        Tags.of(self).add("Project", "banking-intelligence")
        Tags.of(self).add("Environment", settings.environment)
        Tags.of(self).add("CostCenter", "customer-analytics")
        Tags.of(self).add("ManagedBy", "cdk")

        # 1) Network + database.
        data_construct = DataLayerConstruct(
            self,
            "DataLayer",
            environment=settings.environment,
            db_instance_class=settings.db_instance_class,
            db_allocated_storage=settings.db_allocated_storage,
        )

        # 2) Cognito user pool.
        auth_construct = AuthLayerConstruct(
            self, "AuthLayer", environment=settings.environment
        )

        # 3) API layer (single Lambda).
        api_construct = ApiLayerConstruct(
            self,
            "ApiLayer",
            environment=settings.environment,
            vpc=data_construct.vpc,
            db_secret_arn=data_construct.db_secret.secret_arn,
            model_id=settings.model_id,
            user_pool=auth_construct.user_pool,
            user_pool_client=auth_construct.user_pool_client,
            lambda_memory_mb=settings.lambda_memory_mb,
            lambda_timeout_seconds=settings.lambda_timeout_seconds,
            extra_environment={
                "RISK_ANALYSIS_BATCH_CAP": str(settings.risk_analysis_batch_cap),
                "CUSTOMER_FETCH_LIMIT": str(settings.customer_fetch_limit),
                "CACHE_TTL_SECONDS": str(settings.cache_ttl_seconds),
                "CACHE_MAX_SIZE": str(settings.cache_max_size),
            },
        )

        # Permissions for the API Lambda.
        data_construct.db_secret.grant_read(api_construct.main_lambda)
        data_construct.db_instance.connections.allow_default_port_from(api_construct.main_lambda)
        api_construct.main_lambda.add_to_role_policy(
            iam.PolicyStatement(
                actions=["bedrock:InvokeModel"],
                resources=["*"],
            )
        )

        # Outputs to quickly find resources.
        CfnOutput(self, "ApiEndpoint", value=api_construct.api.api_endpoint)
        CfnOutput(self, "UserPoolId", value=auth_construct.user_pool.user_pool_id)
        CfnOutput(
            self,
            "UserPoolClientId",
            value=auth_construct.user_pool_client.user_pool_client_id,
        )
        CfnOutput(self, "DbSecretArn", value=data_construct.db_secret.secret_arn)
