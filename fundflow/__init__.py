"""FundFlow crowdfunding API"""
