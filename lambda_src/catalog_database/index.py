from lakeshare.database_provisioner import resource


def lambda_handler(event, context):
    return resource(event, context)
